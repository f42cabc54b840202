"""UTC datetime utilities for consistent timezone handling.

All datetime values in taskgate are timezone-aware UTC. Workflow code
must not call these for "now": it reads time from the workflow clock
so replays stay deterministic. These helpers serve activities, the
API layer and persistence boundaries.
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Args:
        dt: A datetime that may be naive or aware

    Returns:
        UTC-aware datetime or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def add_ms(dt: datetime, ms: int) -> datetime:
    """Return dt shifted by a (possibly negative) number of milliseconds."""
    return dt + timedelta(milliseconds=ms)


def diff_ms(later: datetime, earlier: datetime) -> int:
    """Return later - earlier in whole milliseconds (negative when later < earlier)."""
    delta = later - earlier
    return (delta.days * 86_400_000) + (delta.seconds * 1000) + (delta.microseconds // 1000)

