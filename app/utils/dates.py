"""
Date/time helpers.

All timestamps are stored timezone-aware in UTC. Some backends (SQLite)
hand them back naive, so comparisons go through ensure_utc().
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """
    Return value as an aware UTC datetime.

    Naive datetimes are assumed to already be in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
