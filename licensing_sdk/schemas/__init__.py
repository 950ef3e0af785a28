"""Pydantic schemas for SDK records."""

from .credential_schema import Credential
from .injectable_schema import Injectable
from .license_check_schema import LicenseCheckResult
from .verdict_schema import ValidationVerdict

__all__ = [
    "Credential",
    "Injectable",
    "LicenseCheckResult",
    "ValidationVerdict",
]
