"""
Constants and enums for the licensing SDK.

This module centralizes all magic strings and constants used throughout
the SDK to ensure consistency and maintainability.
"""

from enum import Enum


class InvalidBehavior(str, Enum):
    """Fallback behavior when license validation fails."""

    MODAL = "modal"
    REDIRECT = "redirect"
    LOG = "log"
    SILENT = "silent"


class InjectableMode(str, Enum):
    """Known write modes for injectables."""

    REPLACE = "replace"
    APPEND = "append"
    PREPEND = "prepend"
    INJECT = "inject"
    INLINE_RENDER = "inline_render"
    STREAM = "stream"


class InjectableType(str, Enum):
    """Known injectable content types."""

    FILE = "file"
    SNIPPET = "snippet"
    HTML = "html"
    MARKDOWN = "markdown"
    CSS = "css"
    JSON = "json"
    CONFIG = "config"
    SDK_MODULE = "sdk_module"
    TEMPLATE = "template"
    DOCS = "docs"
    COMPONENT = "component"


class CredentialKind(str, Enum):
    """Kinds of credentials accepted by the remote service."""

    LICENSE = "license"
    API_KEY = "api_key"


class BootstrapState(str, Enum):
    """States of the bootstrap state machine, in execution order."""

    CREDENTIAL_RESOLUTION = "credential_resolution"
    CACHE_CHECK = "cache_check"
    DOMAIN_VALIDATION = "domain_validation"
    PAYMENT_AND_LICENSE_CHECK = "payment_and_license_check"
    INJECTABLE_RETRIEVAL = "injectable_retrieval"
    INJECTABLE_PROCESSING = "injectable_processing"
    READY_DISPATCH = "ready_dispatch"
    FAILURE = "failure"
    COMPLETED = "completed"


class FailureReason(str, Enum):
    """Reasons a bootstrap run can end in the failure state."""

    MISSING_CREDENTIAL = "MissingCredential"
    DOMAIN_NOT_ALLOWED = "DomainNotAllowed"
    LICENSE_INVALID = "LicenseInvalid"
    PAYMENT_REQUIRED = "PaymentRequired"
    API_ERROR = "ApiError"
    INJECTABLES_UNAVAILABLE = "InjectablesUnavailable"


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    BASE_URL = "LICENSING_BASE_URL"
    LICENSE_KEY = "LICENSING_LICENSE_KEY"
    API_KEY = "LICENSING_API_KEY"
    SECRET = "LICENSING_SECRET"
    CACHE_PATH = "LICENSING_CACHE_PATH"
    INJECTABLES_PATH = "LICENSING_INJECTABLES_PATH"
    LOG_LEVEL = "LOG_LEVEL"


class Limits:
    """SDK limits and defaults."""

    DEFAULT_PAGE_SIZE = 50
    MAX_PAGE_SIZE = 500
    DEFAULT_TIMEOUT_MS = 5000
    DEFAULT_ACTION = "bootstrap"
    DEFAULT_BASE_URL = "https://api.licensing.local"
    DEFAULT_INJECTABLES_PATH = "./injectables"
    DEFAULT_INVALID_MESSAGE = "This application's license could not be validated."


class ApiPath:
    """Remote service endpoint paths, relative to the base URL."""

    LICENSE_VALIDATE = "/api/v1/licenses/validate"
    INJECTABLES = "/api/v1/injectables"
