"""
Consolidated exception system with error codes, context, and correlation support.

This module provides a unified exception hierarchy for the entire SDK,
with automatic logging and correlation ID tracking. Every error carries
enough context (slug, phase, state) to be actionable by the host application.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

_thread_local = threading.local()


class ErrorCode(str, Enum):
    """Standardized error codes."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    IO_ERROR = "1001"
    CONNECTION_ERROR = "1002"
    CONFIGURATION_ERROR = "1003"
    TIMEOUT_ERROR = "1004"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"

    # License errors (4xxx)
    LICENSE_INVALID = "4000"
    PAYMENT_REQUIRED = "4001"
    DOMAIN_NOT_ALLOWED = "4002"
    PERMISSION_DENIED = "4003"

    # External service errors (5xxx)
    EXTERNAL_API_ERROR = "5002"
    RATE_LIMITED = "5003"
    MALFORMED_RESPONSE = "5004"

    # Cryptographic errors (6xxx)
    SIGNATURE_MISMATCH = "6000"
    MALFORMED_PAYLOAD = "6001"
    DECRYPTION_FAILED = "6002"

    # Injectable errors (7xxx)
    MATERIALIZATION_FAILED = "7000"
    INJECTABLES_FAILED = "7001"


class BaseError(Exception):
    """Base exception with context, error codes, logging, and error chaining."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Initialize base error with rich context.

        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            status_code: HTTP-style status code describing the failure class
            cause: Original exception that caused this error
            **context: Additional context information
        """
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())
        self.context = context

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id

        self.context["error_id"] = self.error_id

        if cause:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        self._log_error()

        super().__init__(message)

    def _log_error(self) -> None:
        """Log error with appropriate level based on status code."""
        # Imported lazily, the logger module imports config which imports us
        from .utils.logger import get_logger

        logger = get_logger()

        log_data = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "timestamp": self.timestamp,
            "context": {k: v for k, v in self.context.items() if k not in ["cause", "traceback"]},
        }

        if "correlation_id" in self.context:
            log_data["correlation_id"] = self.context["correlation_id"]

        if self.status_code >= 500:
            logger.error(f"Error {self.error_code.value}: {self.message}", extra=log_data)
        elif self.status_code >= 400:
            logger.warning(f"Client error {self.error_code.value}: {self.message}", extra=log_data)
        else:
            logger.info(f"Error {self.error_code.value}: {self.message}", extra=log_data)

    def to_dict(
        self, include_cause: bool = False, include_traceback: bool = False
    ) -> Dict[str, Any]:
        """
        Convert to dict for reporting.

        Args:
            include_cause: Include cause information (useful for debugging)
            include_traceback: Include full traceback (only in debug mode)

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        result: Dict[str, Any] = {
            "error": {
                "id": self.error_id,
                "type": type(self).__name__,
                "code": self.error_code.value,
                "message": self.message,
                "timestamp": self.timestamp,
                "context": {
                    k: v
                    for k, v in self.context.items()
                    if k not in ["cause", "error_id", "correlation_id"]
                },
            }
        }

        if "correlation_id" in self.context:
            result["error"]["correlation_id"] = self.context["correlation_id"]

        if include_cause and "cause" in self.context:
            result["error"]["cause"] = {
                "type": self.context["cause"]["type"],
                "message": self.context["cause"]["message"],
            }
            if include_traceback:
                result["error"]["cause"]["traceback"] = self.context["cause"]["traceback"]

        return result

    def add_context(self, **kwargs: Any) -> "BaseError":
        """
        Add additional context to the error (fluent interface).

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    @property
    def error_chain(self) -> List[Exception]:
        """Get the full chain of errors."""
        chain: List[Exception] = [self]
        current = self.cause
        while current:
            chain.append(current)
            current = getattr(current, "cause", None)
        return chain


# ==================== CONFIGURATION ERRORS ====================


class ConfigurationError(BaseError):
    """Configuration errors, raised before any remote call."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        cause: Optional[Exception] = None,
        **context,
    ):
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


class MissingCredentialError(ConfigurationError):
    """Raised when neither a license key nor an API key is configured."""

    def __init__(self, message: str = "No license key or API key configured", **kwargs):
        super().__init__(message, error_code=ErrorCode.MISSING_REQUIRED, **kwargs)


class InvalidConfigValueError(ConfigurationError):
    """Raised when a configuration option holds an unusable value."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, field=field, error_code=ErrorCode.VALIDATION_FAILED, **kwargs)


# ==================== REMOTE SERVICE ERRORS ====================


class RemoteServiceError(BaseError):
    """Remote licensing service errors."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.EXTERNAL_API_ERROR,
        status_code: int = 502,
        cause: Optional[Exception] = None,
        **context,
    ):
        if endpoint:
            context["endpoint"] = endpoint
        super().__init__(message, error_code, status_code, cause, **context)


class ApiUnreachableError(RemoteServiceError):
    """Raised when the remote service cannot be reached (network failure, timeout)."""

    def __init__(self, message: str = "Licensing service unreachable", **kwargs):
        kwargs.setdefault("error_code", ErrorCode.CONNECTION_ERROR)
        super().__init__(message, status_code=503, **kwargs)


class ApiRejectedError(RemoteServiceError):
    """Raised when the remote service rejects the request."""

    def __init__(
        self, message: str = "Licensing service rejected the request", http_status: int = 0, **kwargs
    ):
        kwargs["http_status"] = http_status
        kwargs.setdefault("error_code", ErrorCode.PERMISSION_DENIED)
        super().__init__(message, status_code=502, **kwargs)
        self.http_status = http_status


class RateLimitedError(ApiRejectedError):
    """Raised when the remote service rate limits the client."""

    def __init__(self, message: str = "Licensing service rate limit exceeded", **kwargs):
        kwargs.setdefault("http_status", 429)
        super().__init__(message, error_code=ErrorCode.RATE_LIMITED, **kwargs)


class MalformedResponseError(RemoteServiceError):
    """Raised when a remote response cannot be decoded or does not match its schema."""

    def __init__(self, message: str = "Malformed response from licensing service", **kwargs):
        super().__init__(message, error_code=ErrorCode.MALFORMED_RESPONSE, **kwargs)


# ==================== CRYPTOGRAPHIC ERRORS ====================


class CryptoError(BaseError):
    """Base exception for injectable decryption errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DECRYPTION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        super().__init__(message, error_code, 422, cause, **context)


class SignatureMismatchError(CryptoError):
    """Raised when the payload MAC does not match; decryption is never attempted."""

    def __init__(self, message: str = "Payload signature mismatch", **kwargs):
        super().__init__(message, error_code=ErrorCode.SIGNATURE_MISMATCH, **kwargs)


class MalformedPayloadError(CryptoError):
    """Raised when a ciphertext blob cannot be decoded into its parts."""

    def __init__(self, message: str = "Malformed encrypted payload", **kwargs):
        super().__init__(message, error_code=ErrorCode.MALFORMED_PAYLOAD, **kwargs)


class DecryptionFailedError(CryptoError):
    """Raised when the cipher rejects the payload (wrong key, bad padding)."""

    def __init__(self, message: str = "Payload decryption failed", **kwargs):
        super().__init__(message, error_code=ErrorCode.DECRYPTION_FAILED, **kwargs)


# ==================== INJECTABLE ERRORS ====================


class MaterializationError(BaseError):
    """Raised when decrypted content cannot be written to its target."""

    def __init__(
        self,
        message: str,
        slug: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        if slug:
            context["slug"] = slug
        super().__init__(message, ErrorCode.MATERIALIZATION_FAILED, 500, cause, **context)


class InjectableProcessingError(BaseError):
    """Aggregate of the per-injectable errors collected during one bootstrap run."""

    def __init__(self, errors: List[BaseError], message: Optional[str] = None, **context):
        self.errors = list(errors)
        slugs = [str(e.context.get("slug", "?")) for e in self.errors]
        context["slugs"] = slugs
        super().__init__(
            message or f"{len(self.errors)} injectable(s) failed: {', '.join(slugs)}",
            ErrorCode.INJECTABLES_FAILED,
            500,
            **context,
        )


class LicenseEnforcementError(BaseError):
    """Raised on request by hosts that prefer an exception over inspecting a failed result."""

    def __init__(self, message: str, reason: str, cause: Optional[Exception] = None, **context):
        context["reason"] = reason
        self.reason = reason
        super().__init__(message, ErrorCode.LICENSE_INVALID, 403, cause, **context)


# Correlation ID management
def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current thread."""
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    """Get the current thread's correlation ID."""
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    """Clear the current thread's correlation ID."""
    if hasattr(_thread_local, "correlation_id"):
        delattr(_thread_local, "correlation_id")
