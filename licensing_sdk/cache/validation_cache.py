"""
Local, day-bounded cache of validation verdicts.

Verdicts are stored as one JSON document per fingerprint in a directory that
several processes may share. Writes go through a temp file and os.replace, so
readers never see partial documents and the last writer wins. No locking is
needed because every writer produces the same verdict for a fingerprint
within one day.

Cache I/O failures are never fatal: they are logged and treated as a miss.
"""

import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..schemas.verdict_schema import ValidationVerdict
from ..utils.hash_utils import calculate_fingerprint, utc_today
from ..utils.json_utils import loads
from ..utils.logger import get_logger

_SUFFIX = ".json"


class ValidationCache:
    """Filesystem-backed verdict store keyed by fingerprint."""

    def __init__(self, cache_path: Union[str, Path]):
        self.cache_path = Path(cache_path).expanduser()
        self.logger = get_logger()

    @staticmethod
    def fingerprint(credential_value: str, action: str, day: Optional[date] = None) -> str:
        """Today's (or the given day's) fingerprint for a credential and action."""
        return calculate_fingerprint(credential_value, action, day)

    def _entry_path(self, fingerprint: str) -> Path:
        return self.cache_path / f"{fingerprint}{_SUFFIX}"

    def get(self, fingerprint: str, day: Optional[date] = None) -> Optional[ValidationVerdict]:
        """
        Look up the verdict stored under a fingerprint.

        Args:
            fingerprint: Cache key from fingerprint()
            day: Day the lookup is made for; entries checked on another UTC day
                are ignored

        Returns:
            The cached verdict, or None on miss or read failure
        """
        entry_path = self._entry_path(fingerprint)
        try:
            raw = entry_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(
                "Validation cache read failed, treating as miss",
                extra={"cache_file": str(entry_path), "error_details": str(e)},
            )
            return None

        try:
            verdict = ValidationVerdict.model_validate(loads(raw))
        except (ValueError, PydanticValidationError) as e:
            self.logger.warning(
                "Validation cache entry is corrupt, treating as miss",
                extra={"cache_file": str(entry_path), "error_details": str(e)},
            )
            return None

        if verdict.credential_fingerprint != fingerprint:
            return None
        if utc_today(verdict.checked_at) != (day or utc_today()):
            return None

        return verdict

    def put(self, fingerprint: str, verdict: ValidationVerdict) -> bool:
        """
        Store a verdict, superseding any previous entry.

        Returns:
            True when the entry was written, False when the write was discarded
        """
        entry_path = self._entry_path(fingerprint)
        temp_name = None
        try:
            self.cache_path.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                dir=self.cache_path, prefix=f".{fingerprint[:16]}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(verdict.model_dump_json())
            os.replace(temp_name, entry_path)
            temp_name = None
        except OSError as e:
            self.logger.warning(
                "Validation cache write failed, verdict discarded",
                extra={"cache_file": str(entry_path), "error_details": str(e)},
            )
            return False
        finally:
            if temp_name is not None:
                try:
                    os.unlink(temp_name)
                except OSError:
                    pass

        self.logger.debug("Validation verdict cached", extra={"cache_file": str(entry_path)})
        return True

    def clear(self) -> int:
        """
        Remove every cached verdict.

        Returns:
            Number of entries removed
        """
        removed = 0
        if not self.cache_path.is_dir():
            return removed
        for entry in self.cache_path.glob(f"*{_SUFFIX}"):
            try:
                entry.unlink()
                removed += 1
            except OSError as e:
                self.logger.warning(
                    "Could not remove validation cache entry",
                    extra={"cache_file": str(entry), "error_details": str(e)},
                )
        return removed
