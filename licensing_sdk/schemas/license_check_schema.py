"""
Result of a license check round trip.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LicenseCheckResult(BaseModel):
    """License validity and payment status confirmed in one remote call."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool = Field(description="License is valid")
    is_paid: bool = Field(description="Project is paid")
    domain_allowed: Optional[bool] = Field(
        default=None, description="None when the project is not domain locked"
    )
    raw_response: Dict[str, Any] = Field(
        default_factory=dict, description="Decoded response body as received"
    )
