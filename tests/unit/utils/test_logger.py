"""
Unit tests for the logging utilities.

Tests the ContextAwareLogger wrapper and the configure/get helpers with real
handlers writing to StringIO.
"""

import logging
from io import StringIO

from licensing_sdk.config import LoggingConfig
from licensing_sdk.utils import logger as utils_logger
from licensing_sdk.utils.logger import ContextAwareLogger, configure_logging, get_logger


def _capture(name: str):
    base_logger = logging.getLogger(name)
    base_logger.setLevel(logging.DEBUG)
    base_logger.propagate = False
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    base_logger.handlers = [handler]
    return base_logger, stream


class TestContextAwareLogger:
    """Test the ContextAwareLogger wrapper."""

    def test_logger_initialization(self):
        base_logger = logging.getLogger("test.licensing.init")

        assert ContextAwareLogger(base_logger).logger is base_logger

    def test_message_without_extra(self):
        base_logger, stream = _capture("test.licensing.plain")

        ContextAwareLogger(base_logger).info("Test message")

        assert stream.getvalue().strip() == "Test message"

    def test_extra_rendered_pipe_delimited(self):
        base_logger, stream = _capture("test.licensing.extra")

        ContextAwareLogger(base_logger).info("Checked", extra={"slug": "a.css", "count": 3})

        assert stream.getvalue().strip() == "Checked | slug=a.css | count=3"

    def test_sensitive_keys_redacted(self):
        base_logger, stream = _capture("test.licensing.redact")

        ContextAwareLogger(base_logger).warning(
            "Oops", extra={"secret": "hunter2", "license": "LIC-1", "slug": "x"}
        )

        output = stream.getvalue()
        assert "hunter2" not in output
        assert "LIC-1" not in output
        assert "secret=***" in output
        assert "slug=x" in output

    def test_reserved_record_keys_do_not_fail(self):
        """Extras named like LogRecord attributes are prefixed instead of raising."""
        base_logger, stream = _capture("test.licensing.reserved")

        ContextAwareLogger(base_logger).info("Loaded", extra={"module": "x", "name": "y"})

        assert "module=x" in stream.getvalue()

    def test_exception_includes_traceback(self):
        base_logger, stream = _capture("test.licensing.exc")

        try:
            raise RuntimeError("kaput")
        except RuntimeError:
            ContextAwareLogger(base_logger).exception("Failed")

        assert "Traceback" in stream.getvalue()


class TestConfigureLogging:
    """Test configure_logging() and get_logger()."""

    def test_configured_logger_is_returned(self):
        configured = configure_logging(logging_config=LoggingConfig(level="WARNING"))

        assert get_logger() is configured
        assert configured.logger.level == logging.WARNING
        assert len(configured.logger.handlers) == 1

    def test_reconfigure_replaces_handlers(self):
        configure_logging(log_level="INFO")
        configured = configure_logging(log_level="DEBUG")

        assert len(configured.logger.handlers) == 1
        assert configured.logger.level == logging.DEBUG

    def test_unconfigured_logger_propagates(self):
        assert utils_logger._sdk_logger is None

        sdk_logger = get_logger()

        assert sdk_logger.logger.name == "licensing_sdk"
