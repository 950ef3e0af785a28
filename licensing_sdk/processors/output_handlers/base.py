"""
Base output handler interface and common functionality.

Output handlers turn one decrypted injectable into a concrete side effect
(a file write) or an in-memory handle. The materializer picks the handler
from the injectable's mode.
"""

import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ...schemas.injectable_schema import Injectable
from ...utils.logger import get_logger


class OutputHandlerStatus(str, Enum):
    """Status values for output handler execution results."""

    SUCCESS = "success"  # Content written or handed back
    FALLBACK = "fallback"  # Mode unsupported, handled with replace semantics


class OutputHandlerResult(BaseModel):
    """
    Result of output handler execution.

    ``location`` is the absolute path written for persisting modes, or the
    content itself for in-memory modes.
    """

    status: OutputHandlerStatus = Field(description="Status of the output operation")
    success: bool = Field(default=True, description="Whether the output was delivered")

    handler_name: str = Field(description="Name of the handler that processed the output")
    slug: str = Field(description="Injectable slug")
    mode: str = Field(description="Write mode that was applied")
    location: str = Field(description="Path written, or in-memory content", repr=False)
    persisted: bool = Field(description="Whether anything was written to disk")

    execution_duration_ms: float = Field(description="Time taken in milliseconds")
    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="When execution completed"
    )
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Handler-specific metadata")

    @property
    def fell_back_to_replace(self) -> bool:
        return self.status == OutputHandlerStatus.FALLBACK


class OutputHandler(ABC):
    """
    Abstract base class for all output handlers.

    Handlers are stateless apart from their configuration and may be reused
    across injectables.
    """

    def __init__(self, destination: str, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the output handler.

        Args:
            destination: Base path (or sink name) the handler writes under
            config: Handler-specific configuration options
        """
        self.destination = destination
        self.config = config or {}
        self.logger = get_logger()
        self._handler_name = self.__class__.__name__

    @abstractmethod
    def handle(self, injectable: Injectable, plaintext: bytes) -> OutputHandlerResult:
        """
        Deliver decrypted content.

        Args:
            injectable: The injectable being materialized
            plaintext: Decrypted content

        Returns:
            OutputHandlerResult describing where the content now lives

        Raises:
            MaterializationError: When the content cannot be delivered
        """
        pass

    def get_handler_info(self) -> Dict[str, Any]:
        """Handler metadata for logging and debugging."""
        return {
            "handler_name": self._handler_name,
            "destination": self.destination,
            "config_keys": list(self.config.keys()),
        }

    def _execute_with_timing(self, operation) -> tuple[Any, float]:
        """
        Execute an operation and measure execution time.

        Returns:
            Tuple of (operation_result, duration_in_milliseconds)
        """
        start_time = time.time()
        result = operation()
        return result, (time.time() - start_time) * 1000

    def _create_success_result(
        self,
        injectable: Injectable,
        mode: str,
        location: str,
        persisted: bool,
        execution_duration_ms: float,
        status: OutputHandlerStatus = OutputHandlerStatus.SUCCESS,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> OutputHandlerResult:
        """Create a success result for this handler."""
        return OutputHandlerResult(
            status=status,
            handler_name=self._handler_name,
            slug=injectable.slug,
            mode=mode,
            location=location,
            persisted=persisted,
            execution_duration_ms=execution_duration_ms,
            metadata=metadata or {},
        )
