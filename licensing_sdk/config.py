"""
Configuration for the licensing SDK.

This module provides a strongly typed, immutable configuration record with
support for:
- Environment variables
- camelCase option names as used by the remote service dashboards
- Validation using Pydantic, surfaced as InvalidConfigValueError
"""

import os
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .constants import EnvironmentVariable, InvalidBehavior, Limits, LogLevel
from .exceptions import InvalidConfigValueError


def _default_cache_path() -> str:
    return os.getenv(
        EnvironmentVariable.CACHE_PATH.value,
        os.path.join(os.path.expanduser("~"), ".cache", "licensing_sdk"),
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class SDKConfig(BaseModel):
    """
    Immutable configuration for one bootstrap run.

    Constructed once and passed explicitly to every component; never mutated
    afterwards. Option names from the remote dashboard (camelCase) are
    accepted as aliases, e.g. ``SDKConfig(invalidBehavior="log")``.
    """

    # Defaults come from the environment, so they are validated like explicit options
    model_config = ConfigDict(
        frozen=True, populate_by_name=True, arbitrary_types_allowed=True, validate_default=True
    )

    base_url: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.BASE_URL.value, Limits.DEFAULT_BASE_URL
        ),
        description="Base URL of the remote licensing service",
    )
    license: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LICENSE_KEY.value),
        description="Runtime license key; takes precedence over api_key",
        repr=False,
    )
    api_key: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.API_KEY.value),
        description="Backend API key",
        repr=False,
    )
    secret: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.SECRET.value),
        description="Project secret used to decrypt injectables",
        repr=False,
    )
    timeout: int = Field(
        default=Limits.DEFAULT_TIMEOUT_MS, description="Remote call timeout in milliseconds"
    )
    recheck: bool = Field(
        default=False, description="Always revalidate remotely instead of trusting the daily cache"
    )
    injectables: bool = Field(default=True, description="Retrieve injectables after validation")
    injectables_verify: bool = Field(
        default=True,
        alias="injectablesVerify",
        description="Verify injectable signatures before decrypting",
    )
    injectables_path: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.INJECTABLES_PATH.value, Limits.DEFAULT_INJECTABLES_PATH
        ),
        alias="injectablesPath",
        description="Base directory for materialized injectables",
    )
    injectables_required: bool = Field(
        default=False,
        alias="injectablesRequired",
        description="Treat injectable retrieval failure as a bootstrap failure",
    )
    handle_injectables: bool = Field(
        default=True,
        alias="handleInjectables",
        description="Materialize retrieved injectables",
    )
    injectables_processor: Any = Field(
        default=None,
        alias="injectablesProcessor",
        description="Custom processor selector (instance, class, callable or import path)",
    )
    invalid_behavior: InvalidBehavior = Field(
        default=InvalidBehavior.MODAL,
        alias="invalidBehavior",
        description="Fallback behavior when validation fails",
    )
    redirect_url: Optional[str] = Field(
        default=None, alias="redirectUrl", description="Target for the redirect behavior"
    )
    custom_invalid_message: Optional[str] = Field(
        default=None, alias="customInvalidMessage", description="Message for the modal behavior"
    )
    custom_invalid_view: Optional[str] = Field(
        default=None, alias="customInvalidView", description="View file for the modal behavior"
    )
    on_ready: Optional[Callable[[Any], Any]] = Field(
        default=None, alias="onReady", description="Called with the raw validation response"
    )
    action: str = Field(default=Limits.DEFAULT_ACTION, description="Action tag sent with checks")
    per_page: int = Field(
        default=Limits.DEFAULT_PAGE_SIZE, description="Page size for injectable listings"
    )
    domain: Optional[str] = Field(
        default=None, description="Domain reported to domain-locked projects"
    )
    cache_path: str = Field(
        default_factory=_default_cache_path,
        alias="cachePath",
        description="Directory holding cached validation verdicts",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @field_validator("base_url")
    def validate_base_url(cls, v: str) -> str:
        """Base URL must be an http(s) URL; trailing slashes are dropped."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got {v!r}")
        return v.rstrip("/")

    @field_validator("timeout")
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeout must be a positive number of milliseconds")
        return v

    @field_validator("per_page")
    def validate_per_page(cls, v: int) -> int:
        if not 1 <= v <= Limits.MAX_PAGE_SIZE:
            raise ValueError(f"per_page must be between 1 and {Limits.MAX_PAGE_SIZE}")
        return v

    @field_validator("license", "api_key", "secret")
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_behavior_targets(self) -> "SDKConfig":
        if self.invalid_behavior == InvalidBehavior.REDIRECT and not self.redirect_url:
            raise ValueError("redirect_url is required when invalid_behavior is 'redirect'")
        return self

    @property
    def timeout_seconds(self) -> float:
        """Timeout converted for HTTP clients that expect seconds."""
        return self.timeout / 1000.0

    @classmethod
    def build(cls, **options: Any) -> "SDKConfig":
        """
        Create a configuration, translating validation failures.

        Raises:
            InvalidConfigValueError: If any option fails validation
        """
        try:
            return cls(**options)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or None
            raise InvalidConfigValueError(
                f"Invalid configuration: {first['msg']}", field=field, cause=e
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> "SDKConfig":
        """Create configuration from environment variables plus explicit overrides."""
        return cls.build(**overrides)
