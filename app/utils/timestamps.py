"""
Timestamp helpers.

CRITICAL: All datetimes handled by the core must be timezone-aware (UTC),
otherwise duplicate-window arithmetic mixes naive and aware values and raises.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value) -> Optional[datetime]:
    """
    Normalise a stored timestamp to an aware UTC datetime.

    Accepts datetimes (naive values are assumed to be UTC), ISO-8601 strings
    (a trailing ``Z`` is accepted) and Firestore timestamp objects. Returns
    None for None. Anything else raises ValueError so pydantic reports it.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    # Firestore Timestamp interface
    if hasattr(value, "ToDatetime"):
        return ensure_utc(value.ToDatetime())
    if hasattr(value, "timestamp"):
        return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
    raise ValueError(f"Unsupported timestamp value: {value!r}")
