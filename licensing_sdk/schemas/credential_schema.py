"""
Credential schema.

A bootstrap run operates on exactly one credential: the license key when
configured, otherwise the API key.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import CredentialKind
from ..utils.hash_utils import mask_value


class Credential(BaseModel):
    """Credential resolved from configuration; immutable for the run."""

    model_config = ConfigDict(frozen=True)

    kind: CredentialKind = Field(description="License key or API key")
    value: str = Field(min_length=1, description="Credential value", repr=False)

    @property
    def masked(self) -> str:
        """Credential value safe for logs."""
        return mask_value(self.value)

    @classmethod
    def resolve(cls, license_key: Optional[str], api_key: Optional[str]) -> Optional["Credential"]:
        """
        Pick the credential to validate with.

        The license key takes precedence when both are present.

        Returns:
            Credential, or None when neither is configured
        """
        if license_key:
            return cls(kind=CredentialKind.LICENSE, value=license_key)
        if api_key:
            return cls(kind=CredentialKind.API_KEY, value=api_key)
        return None

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.masked}"
