"""Duration parsing and formatting.

Durations are written either as non-negative numbers of milliseconds or
as ``<number><unit>`` strings ("30s", "1.5h", "2 days"). Everything here
is pure and returns whole milliseconds.
"""

from __future__ import annotations

import math
import re

from taskgate.core.constants import (
    MS_PER_DAY,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    MS_PER_SECOND,
    MS_PER_WEEK,
)
from taskgate.domain.exceptions import InvalidDurationException

Duration = str | int | float

_DURATION_RE = re.compile(
    r"^(\d+(?:\.\d+)?)\s*"
    r"(ms|s|sec|seconds?|m|min|minutes?|h|hr|hours?|d|days?|w|weeks?)$",
    re.IGNORECASE,
)
_NUMERIC_RE = re.compile(r"^\d+(?:\.\d+)?$")

_UNIT_MS: dict[str, int] = {
    "ms": 1,
    "s": MS_PER_SECOND,
    "sec": MS_PER_SECOND,
    "second": MS_PER_SECOND,
    "seconds": MS_PER_SECOND,
    "m": MS_PER_MINUTE,
    "min": MS_PER_MINUTE,
    "minute": MS_PER_MINUTE,
    "minutes": MS_PER_MINUTE,
    "h": MS_PER_HOUR,
    "hr": MS_PER_HOUR,
    "hour": MS_PER_HOUR,
    "hours": MS_PER_HOUR,
    "d": MS_PER_DAY,
    "day": MS_PER_DAY,
    "days": MS_PER_DAY,
    "w": MS_PER_WEEK,
    "week": MS_PER_WEEK,
    "weeks": MS_PER_WEEK,
}


def parse_duration(value: Duration) -> int:
    """Parse a duration into whole milliseconds.

    Accepts a non-negative number (already milliseconds), a bare numeric
    string, or a number followed by a unit (ms, s, m, h, d, w and their
    long forms, case-insensitive, optional whitespace between). Fractional
    values are allowed; the result is floored.

    Args:
        value: Duration to parse.

    Returns:
        Milliseconds as a non-negative int.

    Raises:
        InvalidDurationException: Negative, non-finite, or unparseable input.
    """
    if isinstance(value, bool):
        raise InvalidDurationException(value, "expected a number or duration string")
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidDurationException(value, "must be finite")
        if value < 0:
            raise InvalidDurationException(value, "must be non-negative")
        return math.floor(value)
    if not isinstance(value, str):
        raise InvalidDurationException(value, "expected a number or duration string")

    text = value.strip()
    if _NUMERIC_RE.match(text):
        ms = float(text)
    else:
        match = _DURATION_RE.match(text)
        if not match:
            raise InvalidDurationException(
                value, 'expected format like "30s", "10m", "1h", "2d" or "1w"'
            )
        ms = float(match.group(1)) * _UNIT_MS[match.group(2).lower()]
    if not math.isfinite(ms):
        raise InvalidDurationException(value, "must be finite")
    return math.floor(ms)


def is_duration(value: object) -> bool:
    """Return True if value parses as a duration."""
    try:
        parse_duration(value)  # type: ignore[arg-type]
    except InvalidDurationException:
        return False
    return True


def format_duration(ms: int, short: bool = False) -> str:
    """Format milliseconds as "1w 2d 3h 4m 5s 6ms".

    Zero components are omitted and zero itself is "0s". With short=True
    only the largest unit is returned and milliseconds are dropped
    (90000 -> "1m").

    Raises:
        InvalidDurationException: Negative or non-finite input.
    """
    if isinstance(ms, bool) or not math.isfinite(ms) or ms < 0:
        raise InvalidDurationException(ms, "must be a non-negative finite number")
    ms = math.floor(ms)
    if ms == 0:
        return "0s"

    parts: list[str] = []
    remainder = ms
    for unit, size in (("w", MS_PER_WEEK), ("d", MS_PER_DAY), ("h", MS_PER_HOUR),
                       ("m", MS_PER_MINUTE), ("s", MS_PER_SECOND)):
        count, remainder = divmod(remainder, size)
        if count:
            parts.append(f"{count}{unit}")
    if remainder and not short:
        parts.append(f"{remainder}ms")

    if not parts:
        # sub-second value in short mode
        return "0s"
    if short:
        return parts[0]
    return " ".join(parts)


def format_time_remaining(ms: int) -> str:
    """Format a signed time-remaining value at two-unit precision.

    Examples: 5400000 -> "1h 30m", 172800000 -> "2d", -300000 -> "5m overdue".
    """
    if ms < 0:
        return f"{format_time_remaining(-ms)} overdue"
    seconds = ms // MS_PER_SECOND
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    if days > 0:
        rest = hours % 24
        return f"{days}d {rest}h" if rest else f"{days}d"
    if hours > 0:
        rest = minutes % 60
        return f"{hours}h {rest}m" if rest else f"{hours}h"
    if minutes > 0:
        return f"{minutes}m"
    return f"{seconds}s"


def add_durations(a: Duration, b: Duration) -> int:
    """Return the sum of two durations in milliseconds."""
    return parse_duration(a) + parse_duration(b)


def to_seconds(duration: Duration) -> int:
    """Return the duration in whole seconds (floored)."""
    return parse_duration(duration) // MS_PER_SECOND


def to_minutes(duration: Duration) -> float:
    """Return the duration in minutes (may be fractional)."""
    return parse_duration(duration) / MS_PER_MINUTE


def to_hours(duration: Duration) -> float:
    """Return the duration in hours (may be fractional)."""
    return parse_duration(duration) / MS_PER_HOUR
