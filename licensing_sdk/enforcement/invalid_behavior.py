"""
Dispatch of the configured invalid-behavior when a bootstrap run fails.

None of the behaviors raise on their expected path: they describe terminal,
expected outcomes. "Halting" is signalled back to the host through the
returned EnforcementOutcome; the host process is never terminated here.
"""

import sys
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from pydantic import BaseModel, Field

from ..config import SDKConfig
from ..constants import FailureReason, InvalidBehavior, Limits
from ..utils.logger import get_logger


class InvalidViewRenderer(Protocol):
    """Produces the user-visible output for the modal behavior."""

    def render(self, message: str, view_path: Optional[str]) -> str: ...


class DefaultInvalidViewRenderer:
    """Render the custom view file if readable, else the message, to a stream."""

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stderr
        self.logger = get_logger()

    def render(self, message: str, view_path: Optional[str]) -> str:
        output = message
        if view_path:
            try:
                output = Path(view_path).read_text(encoding="utf-8").replace(
                    "{{ message }}", message
                )
            except (OSError, UnicodeDecodeError) as e:
                self.logger.warning(
                    "Custom invalid view unreadable, using message",
                    extra={"view_path": view_path, "error_details": str(e)},
                )
        self.stream.write(output + "\n")
        return output


def log_redirect(url: str) -> None:
    """Default redirect handler; hosts with an HTTP layer supply their own."""
    get_logger().info("Redirecting after failed license validation", extra={"redirect_url": url})


class EnforcementOutcome(BaseModel):
    """What the dispatcher did for a failed run."""

    behavior: InvalidBehavior = Field(description="Behavior that was applied")
    reason: FailureReason = Field(description="Why the run failed")
    halted: bool = Field(default=True, description="Host should stop further execution")
    rendered_output: Optional[str] = Field(default=None, description="Modal output")
    redirect_url: Optional[str] = Field(default=None, description="Redirect target")
    message: str = Field(description="Message describing the failure")


class InvalidBehaviorDispatcher:
    """Apply the configured invalid-behavior for a failure reason."""

    def __init__(
        self,
        config: SDKConfig,
        renderer: Optional[InvalidViewRenderer] = None,
        redirector: Optional[Callable[[str], Any]] = None,
    ):
        self.config = config
        self.renderer = renderer or DefaultInvalidViewRenderer()
        self.redirector = redirector or log_redirect
        self.logger = get_logger()

    def dispatch(self, reason: FailureReason, detail: Optional[str] = None) -> EnforcementOutcome:
        """
        Apply the behavior.

        Args:
            reason: Failure reason reported by the orchestrator
            detail: Error message for the log behavior

        Returns:
            EnforcementOutcome, always with halted=True
        """
        behavior = self.config.invalid_behavior
        message = self.config.custom_invalid_message or Limits.DEFAULT_INVALID_MESSAGE
        outcome = EnforcementOutcome(behavior=behavior, reason=reason, message=message)

        if behavior == InvalidBehavior.MODAL:
            outcome.rendered_output = self.renderer.render(
                message, self.config.custom_invalid_view
            )
        elif behavior == InvalidBehavior.REDIRECT:
            self.redirector(self.config.redirect_url)
            outcome.redirect_url = self.config.redirect_url
        elif behavior == InvalidBehavior.LOG:
            self.logger.error(
                f"License validation failed: {reason.value}",
                extra={"reason": reason.value, "error_details": detail or message},
            )

        return outcome
