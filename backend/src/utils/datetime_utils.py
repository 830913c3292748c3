"""
Datetime utilities for consistent timezone handling across the application.

All timestamps are stored and compared in UTC. Some backends (SQLite) hand
back naive datetimes for timezone-aware columns; ``ensure_utc`` normalizes
them before comparison.
"""

from datetime import datetime, timezone, timedelta
from typing import Optional


def utc_now() -> datetime:
    """Current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware in UTC.

    Naive values are assumed to already be UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def minutes_from_now(minutes: int) -> datetime:
    return utc_now() + timedelta(minutes=minutes)


def is_expired(expires_at: Optional[datetime]) -> bool:
    """True when the deadline is missing or already passed."""
    deadline = ensure_utc(expires_at)
    return deadline is None or deadline <= utc_now()
