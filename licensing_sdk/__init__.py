"""
Licensing SDK - client-side license enforcement and injectable delivery.

Typical use::

    from licensing_sdk import SDKConfig, bootstrap

    result = bootstrap(SDKConfig.from_env(invalid_behavior="log"))
    if result.halted:
        ...
"""

from .bootstrap import BootstrapOrchestrator, BootstrapResult, bootstrap
from .cache import ValidationCache
from .client import RemoteServiceClient
from .config import LoggingConfig, SDKConfig
from .constants import BootstrapState, FailureReason, InjectableMode, InvalidBehavior
from .exceptions import (
    BaseError,
    ConfigurationError,
    CryptoError,
    ErrorCode,
    InjectableProcessingError,
    LicenseEnforcementError,
    MaterializationError,
    RemoteServiceError,
)
from .processors import InjectableMaterializer, InjectableProcessorInterface
from .schemas import Injectable, ValidationVerdict
from .utils.encryption_utils import decrypt, encrypt, verify_and_decrypt

__version__ = "1.0.0"

__all__ = [
    "bootstrap",
    "BootstrapOrchestrator",
    "BootstrapResult",
    "BootstrapState",
    "FailureReason",
    "InjectableMode",
    "InvalidBehavior",
    "SDKConfig",
    "LoggingConfig",
    "ValidationCache",
    "RemoteServiceClient",
    "InjectableMaterializer",
    "InjectableProcessorInterface",
    "Injectable",
    "ValidationVerdict",
    "decrypt",
    "encrypt",
    "verify_and_decrypt",
    "BaseError",
    "ErrorCode",
    "ConfigurationError",
    "RemoteServiceError",
    "CryptoError",
    "MaterializationError",
    "InjectableProcessingError",
    "LicenseEnforcementError",
]
