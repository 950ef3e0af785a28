"""
Injectable schema.

Injectables are artifacts (config, code, templates, files) bound to a license
and delivered by the licensing service, usually encrypted.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ..constants import InjectableMode, InjectableType


class Injectable(BaseModel):
    """One injectable as returned by the licensing service."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    slug: str = Field(min_length=1, description="Unique within a project")
    type: str = Field(default=InjectableType.SNIPPET.value, description="Content type")
    mode: str = Field(default=InjectableMode.REPLACE.value, description="Write mode")
    target_path: str = Field(default="", description="Relative path hint under the base path")
    encrypted_content: Optional[str] = Field(
        default=None, description="Encrypted envelope", repr=False
    )
    content: Optional[str] = Field(default=None, description="Plaintext fallback", repr=False)

    @field_validator("mode", "type", mode="before")
    def normalize_tag(cls, v, info: ValidationInfo):
        if isinstance(v, Enum):
            v = v.value
        v = str(v).strip().lower() if v is not None else ""
        if v:
            return v
        # Missing mode falls back to replace, missing type to snippet
        if info.field_name == "mode":
            return InjectableMode.REPLACE.value
        return InjectableType.SNIPPET.value

    @field_validator("target_path", mode="before")
    def none_to_empty(cls, v):
        return v or ""

    @property
    def is_binary(self) -> bool:
        """Only file injectables carry binary content."""
        return self.type == InjectableType.FILE.value

    @property
    def is_encrypted(self) -> bool:
        return bool(self.encrypted_content)
