"""Validation verdict cache."""

from .validation_cache import ValidationCache

__all__ = ["ValidationCache"]
