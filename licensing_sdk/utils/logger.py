"""
Logging setup for the licensing SDK.

This module provides:
1. ContextAwareLogger, which renders extras as pipe-delimited key=value pairs
   so they survive host applications that override formatters
2. configure_logging/get_logger helpers that the rest of the SDK uses
"""

import logging
import sys
from typing import Optional, Union

from ..config import LoggingConfig

_sdk_logger = None

SDK_LOGGER_NAME = "licensing_sdk"

# Extra keys that must never reach a log line
_REDACTED_KEYS = {"secret", "license", "api_key", "plaintext", "content"}

_RESERVED_RECORD_KEYS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
    "relativeCreated", "thread", "threadName", "processName", "process", "taskName",
    "message", "asctime",
}


class ContextAwareLogger:
    """
    Logger wrapper that formats extra attributes in message while preserving them.

    This ensures extras appear in console output even when the host application
    overrides the formatters.
    """

    def __init__(self, logger):
        """Initialize with an existing logger."""
        self.logger = logger

    def _log_with_formatted_extra(self, level, msg, **kwargs):
        """
        Log with extra data formatted into the message.

        Args:
            level: Logging level method to use
            msg: Log message
            **kwargs: Additional arguments including 'extra'
        """
        extra = kwargs.pop("extra", {}) or {}
        extra = {k: ("***" if k in _REDACTED_KEYS else v) for k, v in extra.items()}

        if extra:
            extra_str = " | ".join([f"{k}={v}" for k, v in extra.items()])
            full_msg = f"{msg} | {extra_str}"
        else:
            full_msg = msg

        # LogRecord reserves some attribute names, prefix them instead of failing
        safe_extra = {
            (f"_{k}" if k in _RESERVED_RECORD_KEYS else k): v
            for k, v in extra.items()
        }

        log_method = getattr(self.logger, level)
        log_method(full_msg, extra=safe_extra, **kwargs)

    def set_level(self, level):
        """Set the logging level of the underlying logger."""
        self.logger.setLevel(level)

    def info(self, msg, **kwargs):
        """Log at INFO level with formatted extra."""
        self._log_with_formatted_extra("info", msg, **kwargs)

    def error(self, msg, **kwargs):
        """Log at ERROR level with formatted extra."""
        self._log_with_formatted_extra("error", msg, **kwargs)

    def warning(self, msg, **kwargs):
        """Log at WARNING level with formatted extra."""
        self._log_with_formatted_extra("warning", msg, **kwargs)

    def debug(self, msg, **kwargs):
        """Log at DEBUG level with formatted extra."""
        self._log_with_formatted_extra("debug", msg, **kwargs)

    def exception(self, msg, **kwargs):
        """Log exception with formatted extra."""
        self._log_with_formatted_extra("exception", msg, **kwargs)


def configure_logging(
    name: str = SDK_LOGGER_NAME,
    log_level: Optional[Union[int, str]] = None,
    logging_config: Optional[LoggingConfig] = None,
) -> ContextAwareLogger:
    """
    Configure the SDK logger with a console handler.

    Args:
        name: Logger name (default: "licensing_sdk")
        log_level: Logging level (default: from logging_config or LOG_LEVEL)
        logging_config: Optional LoggingConfig with level and format

    Returns:
        The configured logger wrapped with ContextAwareLogger
    """
    global _sdk_logger

    logging_config = logging_config or LoggingConfig()
    if log_level is None:
        log_level = logging_config.level

    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(logging_config.format))
    logger.addHandler(console_handler)

    wrapped_logger = ContextAwareLogger(logger)
    wrapped_logger.debug("SDK logger configured", extra={"logger_name": name})
    _sdk_logger = wrapped_logger
    return wrapped_logger


def get_logger(log_level: Optional[Union[int, str]] = None) -> ContextAwareLogger:
    """
    Get the SDK logger.

    Returns the logger installed by configure_logging when there is one,
    otherwise a wrapped "licensing_sdk" logger that propagates to the
    host application's handlers.

    Args:
        log_level: Optional log level to set

    Returns:
        Logger instance
    """
    if _sdk_logger is not None:
        if log_level is not None:
            _sdk_logger.set_level(log_level)
        return _sdk_logger

    logger = logging.getLogger(SDK_LOGGER_NAME)

    if log_level is not None:
        if isinstance(log_level, str):
            log_level = getattr(logging, log_level.upper(), logging.INFO)
        logger.setLevel(log_level)

    return ContextAwareLogger(logger)


def reset_logging() -> None:
    """Detach the handlers installed by configure_logging and clear the level (used by tests)."""
    global _sdk_logger
    if _sdk_logger is not None:
        for handler in _sdk_logger.logger.handlers[:]:
            _sdk_logger.logger.removeHandler(handler)
    logging.getLogger(SDK_LOGGER_NAME).setLevel(logging.NOTSET)
    _sdk_logger = None
