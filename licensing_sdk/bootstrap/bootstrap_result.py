"""
Result of one bootstrap run.

The orchestrator never terminates the host process. A failed run comes back
with ``halted=True`` and the enforcement outcome; hosts that prefer
exceptions call ``raise_for_failure()``.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import BootstrapState, FailureReason
from ..enforcement.invalid_behavior import EnforcementOutcome
from ..exceptions import BaseError, InjectableProcessingError, LicenseEnforcementError
from ..processors.processing_result import InjectableOutcome
from ..schemas.injectable_schema import Injectable
from ..schemas.verdict_schema import ValidationVerdict


class BootstrapResult(BaseModel):
    """Overall outcome of a bootstrap run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    correlation_id: str = Field(description="Correlation ID shared by the run's logs and errors")
    success: bool = Field(default=False, description="License and payment check succeeded")
    halted: bool = Field(default=False, description="Host should stop further execution")
    state: BootstrapState = Field(
        default=BootstrapState.CREDENTIAL_RESOLUTION, description="Last state reached"
    )
    states: List[BootstrapState] = Field(default_factory=list, description="States visited")

    failure_reason: Optional[FailureReason] = Field(default=None)
    error: Optional[BaseError] = Field(default=None, exclude=True)
    enforcement: Optional[EnforcementOutcome] = Field(default=None)

    verdict: Optional[ValidationVerdict] = Field(default=None)
    from_cache: bool = Field(default=False, description="Verdict came from the validation cache")
    raw_response: Dict[str, Any] = Field(default_factory=dict, repr=False)

    injectables: List[Injectable] = Field(default_factory=list, repr=False)
    retrieval_error: Optional[BaseError] = Field(default=None, exclude=True)
    outcomes: List[InjectableOutcome] = Field(default_factory=list)
    injectable_errors: List[BaseError] = Field(default_factory=list, exclude=True)

    def enter(self, state: BootstrapState) -> None:
        self.state = state
        self.states.append(state)

    @property
    def materialized(self) -> Dict[str, str]:
        """Slug to location identifier for every successfully processed injectable."""
        return {o.slug: o.location for o in self.outcomes if o.success and o.location is not None}

    @property
    def failed_slugs(self) -> List[str]:
        return [o.slug for o in self.outcomes if not o.success]

    def raise_for_failure(self) -> None:
        """
        Raise LicenseEnforcementError if the run failed.

        Raises:
            LicenseEnforcementError: With the failure reason and the original error as cause
        """
        if self.success:
            return
        reason = self.failure_reason.value if self.failure_reason else "unknown"
        raise LicenseEnforcementError(
            f"License bootstrap failed: {reason}", reason=reason, cause=self.error
        )

    def raise_for_injectable_errors(self) -> None:
        """
        Raise the aggregate of the per-injectable errors, if any.

        Raises:
            InjectableProcessingError: Carrying every collected error in order
        """
        if self.injectable_errors:
            raise InjectableProcessingError(self.injectable_errors)
