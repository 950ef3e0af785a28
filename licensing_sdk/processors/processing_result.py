"""
Per-injectable outcome of a bootstrap run.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from ..exceptions import BaseError


class InjectableOutcome(BaseModel):
    """What happened to one injectable during processing."""

    slug: str = Field(description="Injectable slug")
    mode: str = Field(description="Mode requested by the licensing service")
    success: bool = Field(description="Whether materialization succeeded")
    location: Optional[str] = Field(
        default=None, description="Identifier returned by the processor", repr=False
    )
    error_type: Optional[str] = Field(default=None, description="Exception class name")
    error_code: Optional[str] = Field(default=None, description="Error code if it failed")
    error_message: Optional[str] = Field(default=None, description="Error message if it failed")
    phase: Optional[str] = Field(default=None, description="Phase the failure happened in")
    processor: Optional[str] = Field(default=None, description="Processor that handled it")
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def success_result(
        cls, slug: str, mode: str, location: str, processor: Optional[str] = None
    ) -> "InjectableOutcome":
        return cls(slug=slug, mode=mode, success=True, location=location, processor=processor)

    @classmethod
    def failure_result(
        cls, slug: str, mode: str, error: Exception, processor: Optional[str] = None
    ) -> "InjectableOutcome":
        error_code = None
        phase = None
        if isinstance(error, BaseError):
            error_code = error.error_code.value
            phase = error.context.get("phase")
            message = error.message
        else:
            message = str(error)
        return cls(
            slug=slug,
            mode=mode,
            success=False,
            error_type=type(error).__name__,
            error_code=error_code,
            error_message=message,
            phase=phase,
            processor=processor,
        )
