"""SLA calculator: deadlines, breach checks and warning windows.

Pure functions. Every function takes `now` explicitly so workflow code
can pass its deterministic clock; nothing here reads the wall clock.
"""

from __future__ import annotations

from datetime import datetime

from taskgate.application.dtos.sla import ComputedSLA, SLAStatusInfo
from taskgate.domain.enums import SLAState
from taskgate.domain.value_objects.core import SLAConfig
from taskgate.shared.utils.datetime import add_ms, diff_ms
from taskgate.shared.utils.duration import Duration, format_time_remaining, parse_duration


def compute_deadline(created_at: datetime, deadline: Duration | datetime) -> datetime:
    """Return the absolute deadline.

    An absolute instant is returned unchanged; a duration is added to
    created_at.
    """
    if isinstance(deadline, datetime):
        return deadline
    return add_ms(created_at, parse_duration(deadline))


def is_breached(deadline: datetime, now: datetime) -> bool:
    """True once now has reached the deadline."""
    return now >= deadline


def time_remaining(deadline: datetime, now: datetime) -> int:
    """Milliseconds until the deadline; negative once it has passed."""
    return diff_ms(deadline, now)


def warning_time(deadline: datetime, warn_offset: Duration) -> datetime:
    """Instant at which the warning window opens."""
    return add_ms(deadline, -parse_duration(warn_offset))


def is_in_warning_period(
    deadline: datetime, warn_offset: Duration | None, now: datetime
) -> bool:
    """True when deadline - warn_offset <= now < deadline."""
    if warn_offset is None:
        return False
    return warning_time(deadline, warn_offset) <= now < deadline


def sla_status(
    deadline: datetime, warn_offset: Duration | None, now: datetime
) -> SLAState:
    """Classify now against the deadline and optional warning window."""
    if is_breached(deadline, now):
        return SLAState.BREACHED
    if is_in_warning_period(deadline, warn_offset, now):
        return SLAState.WARNING
    return SLAState.ON_TRACK


def compute_sla(config: SLAConfig, created_at: datetime) -> ComputedSLA:
    """Resolve an SLA config into instants for a task created at created_at."""
    due_at = compute_deadline(created_at, config.deadline)
    warn_at = None
    if config.warn_before is not None:
        warn_at = warning_time(due_at, config.warn_before)
    return ComputedSLA(
        due_at=due_at,
        warn_at=warn_at,
        escalation_chain=config.escalation_chain,
        on_breach=config.on_breach,
    )


def describe_sla(
    deadline: datetime, warn_offset: Duration | None, now: datetime
) -> SLAStatusInfo:
    """Return a point-in-time SLA summary with a human-readable remaining time."""
    remaining = time_remaining(deadline, now)
    state = sla_status(deadline, warn_offset, now)
    return SLAStatusInfo(
        state=state,
        breached=state is SLAState.BREACHED,
        warning=state is SLAState.WARNING,
        time_remaining_ms=remaining,
        time_remaining_formatted=format_time_remaining(remaining),
        deadline=deadline,
    )
