"""Shared utilities: datetime, generators, durations."""

from taskgate.shared.utils.datetime import (
    add_ms,
    diff_ms,
    ensure_utc,
    utc_now,
)
from taskgate.shared.utils.duration import (
    Duration,
    add_durations,
    format_duration,
    format_time_remaining,
    is_duration,
    parse_duration,
    to_hours,
    to_minutes,
    to_seconds,
)
from taskgate.shared.utils.generators import (
    generate_cuid,
    generate_run_id,
    generate_task_id,
)

__all__ = [
    "Duration",
    "add_durations",
    "add_ms",
    "diff_ms",
    "ensure_utc",
    "format_duration",
    "format_time_remaining",
    "generate_cuid",
    "generate_run_id",
    "generate_task_id",
    "is_duration",
    "parse_duration",
    "to_hours",
    "to_minutes",
    "to_seconds",
    "utc_now",
]
