"""Utility modules for the licensing SDK."""

# Encryption utilities
from .encryption_utils import decrypt, encrypt, verify_and_decrypt

# Hash utilities
from .hash_utils import calculate_fingerprint, mask_value, utc_today

# JSON utilities
from .json_utils import canonical_dumps, loads

# Logging
from .logger import configure_logging, get_logger, reset_logging

__all__ = [
    "encrypt",
    "decrypt",
    "verify_and_decrypt",
    "calculate_fingerprint",
    "mask_value",
    "utc_today",
    "canonical_dumps",
    "loads",
    "configure_logging",
    "get_logger",
    "reset_logging",
]
