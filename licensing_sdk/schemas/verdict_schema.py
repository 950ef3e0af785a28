"""
Validation verdict schema.

Verdicts are cached once per credential, action and UTC day.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from .license_check_schema import LicenseCheckResult


class ValidationVerdict(BaseModel):
    """Cached result of a license/payment check."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool = Field(description="License is valid")
    is_paid: bool = Field(description="Project is paid")
    checked_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Time of the remote check"
    )
    credential_fingerprint: str = Field(description="Cache key the verdict was stored under")
    raw_response: Dict[str, Any] = Field(
        default_factory=dict, description="Raw validation response, passed to on_ready"
    )

    @property
    def is_usable(self) -> bool:
        """Valid and paid."""
        return self.is_valid and self.is_paid

    @classmethod
    def from_check(cls, check: LicenseCheckResult, fingerprint: str) -> "ValidationVerdict":
        return cls(
            is_valid=check.is_valid,
            is_paid=check.is_paid,
            credential_fingerprint=fingerprint,
            raw_response=check.raw_response,
        )
