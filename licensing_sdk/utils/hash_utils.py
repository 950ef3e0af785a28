"""
Hash utilities for validation cache keys.

Fingerprints combine the credential, the UTC calendar day and the action tag,
so a cached verdict is only reachable on the day it was written.
"""

import hashlib
from datetime import date, datetime, timezone
from typing import Optional

from ..exceptions import InvalidConfigValueError
from .json_utils import canonical_dumps


def utc_today(now: Optional[datetime] = None) -> date:
    """Return the current calendar day in UTC."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).date()


def calculate_fingerprint(credential_value: str, action: str, day: Optional[date] = None) -> str:
    """
    Calculate the cache fingerprint for a credential on a given day.

    Args:
        credential_value: License key or API key
        action: Action tag sent with the validation call
        day: Calendar day (UTC); defaults to today

    Returns:
        Hex SHA-256 digest

    Raises:
        InvalidConfigValueError: If the credential is empty
    """
    if not credential_value:
        raise InvalidConfigValueError("Cannot fingerprint an empty credential", field="credential")

    day = day or utc_today()
    payload = canonical_dumps(
        {"credential": credential_value, "date": day.isoformat(), "action": action}
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def mask_value(value: Optional[str], visible: int = 4) -> str:
    """Mask a credential for logging, keeping only its last characters."""
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
