"""
Unit tests for the exception system.

Tests the error hierarchy, context enrichment, reporting and correlation IDs.
"""

import pytest

from licensing_sdk.exceptions import (
    ApiRejectedError,
    ApiUnreachableError,
    BaseError,
    ConfigurationError,
    CryptoError,
    DecryptionFailedError,
    ErrorCode,
    InjectableProcessingError,
    InvalidConfigValueError,
    LicenseEnforcementError,
    MalformedPayloadError,
    MaterializationError,
    MissingCredentialError,
    RateLimitedError,
    RemoteServiceError,
    SignatureMismatchError,
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


class TestBaseError:
    """Test BaseError class."""

    def test_basic_error_creation(self):
        error = BaseError("Test error message")

        assert error.message == "Test error message"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.status_code == 500
        assert error.cause is None
        assert error.context["error_id"] == error.error_id
        assert str(error) == "Test error message"

    def test_error_with_cause(self):
        original = ValueError("Original error")
        error = BaseError("Wrapped error", cause=original)

        assert error.cause is original
        assert error.context["cause"]["type"] == "ValueError"
        assert error.error_chain == [error, original]

    def test_add_context_is_fluent(self):
        error = BaseError("Test").add_context(slug="a.css", phase="decrypt")

        assert error.context["slug"] == "a.css"
        assert error.context["phase"] == "decrypt"

    def test_to_dict(self):
        error = BaseError("Boom", cause=RuntimeError("inner"), slug="x")

        report = error.to_dict(include_cause=True)

        assert report["error"]["type"] == "BaseError"
        assert report["error"]["code"] == ErrorCode.INTERNAL_ERROR.value
        assert report["error"]["context"]["slug"] == "x"
        assert "cause" not in report["error"]["context"]
        assert report["error"]["cause"] == {"type": "RuntimeError", "message": "inner"}

    def test_correlation_id_attached(self):
        set_correlation_id("corr-123")
        try:
            error = BaseError("Test")
        finally:
            clear_correlation_id()

        assert error.context["correlation_id"] == "corr-123"
        assert error.to_dict()["error"]["correlation_id"] == "corr-123"


class TestHierarchy:
    """Each failure kind maps to a family and a code."""

    @pytest.mark.parametrize(
        "error, family, code",
        [
            (MissingCredentialError(), ConfigurationError, ErrorCode.MISSING_REQUIRED),
            (InvalidConfigValueError("bad", field="timeout"), ConfigurationError, ErrorCode.VALIDATION_FAILED),
            (ApiUnreachableError(), RemoteServiceError, ErrorCode.CONNECTION_ERROR),
            (ApiRejectedError(http_status=403), RemoteServiceError, ErrorCode.PERMISSION_DENIED),
            (RateLimitedError(), ApiRejectedError, ErrorCode.RATE_LIMITED),
            (SignatureMismatchError(), CryptoError, ErrorCode.SIGNATURE_MISMATCH),
            (MalformedPayloadError(), CryptoError, ErrorCode.MALFORMED_PAYLOAD),
            (DecryptionFailedError(), CryptoError, ErrorCode.DECRYPTION_FAILED),
            (MaterializationError("disk full", slug="a"), BaseError, ErrorCode.MATERIALIZATION_FAILED),
        ],
    )
    def test_family_and_code(self, error, family, code):
        assert isinstance(error, family)
        assert isinstance(error, BaseError)
        assert error.error_code == code

    def test_config_field_in_context(self):
        assert InvalidConfigValueError("bad", field="timeout").context["field"] == "timeout"

    def test_rate_limited_status(self):
        assert RateLimitedError().http_status == 429


class TestAggregates:
    """Test errors that summarize a run."""

    def test_injectable_processing_error(self):
        errors = [
            SignatureMismatchError(slug="b.js"),
            MaterializationError("denied", slug="c.css"),
        ]

        aggregate = InjectableProcessingError(errors)

        assert aggregate.errors == errors
        assert aggregate.context["slugs"] == ["b.js", "c.css"]
        assert "2 injectable(s) failed" in aggregate.message

    def test_license_enforcement_error(self):
        cause = ApiUnreachableError()

        error = LicenseEnforcementError("blocked", reason="ApiError", cause=cause)

        assert error.reason == "ApiError"
        assert error.status_code == 403
        assert error.error_chain == [error, cause]


class TestCorrelationId:
    def test_set_get_clear(self):
        set_correlation_id("abc")
        assert get_correlation_id() == "abc"

        clear_correlation_id()
        assert get_correlation_id() is None
