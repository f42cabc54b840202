"""DTOs for computed SLA values."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from taskgate.domain.enums import BreachAction, SLAState
from taskgate.domain.value_objects.core import EscalationStep


@dataclass(frozen=True)
class ComputedSLA:
    """SLA with instants resolved against a creation time."""

    due_at: datetime
    warn_at: datetime | None
    escalation_chain: tuple[EscalationStep, ...]
    on_breach: BreachAction


@dataclass(frozen=True)
class SLAStatusInfo:
    """Point-in-time view of a task's SLA (for dashboards and API responses)."""

    state: SLAState
    breached: bool
    warning: bool
    time_remaining_ms: int
    time_remaining_formatted: str
    deadline: datetime
