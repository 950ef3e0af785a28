"""Invalid-behavior enforcement."""

from .invalid_behavior import (
    DefaultInvalidViewRenderer,
    EnforcementOutcome,
    InvalidBehaviorDispatcher,
    InvalidViewRenderer,
)

__all__ = [
    "DefaultInvalidViewRenderer",
    "EnforcementOutcome",
    "InvalidBehaviorDispatcher",
    "InvalidViewRenderer",
]
