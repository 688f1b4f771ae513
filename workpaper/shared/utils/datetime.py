"""
UTC datetime helpers.

Every datetime stored or compared by workpaper is timezone-aware UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Normalize a datetime read from storage to aware UTC.

    Naive values are assumed to be UTC; aware values are converted.
    None passes through.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def start_of_day_utc(dt: datetime) -> datetime:
    """Midnight (UTC) of the day dt falls on; used for 'completed today' counts."""
    aware = dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)
    return aware.replace(hour=0, minute=0, second=0, microsecond=0)
