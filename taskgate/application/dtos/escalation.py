"""DTOs for escalation processing of stored tasks."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from taskgate.domain.value_objects.core import AssignmentTarget, EscalationStep


@dataclass(frozen=True)
class EscalationCandidate:
    """The parts of a stored task the escalation processor looks at."""

    task_id: str
    created_at: datetime
    status: str
    due_at: datetime | None = None
    assigned_person: str | None = None
    assigned_group: str | None = None
    escalation_chain: tuple[EscalationStep, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EscalationResult:
    """Outcome of processing one candidate."""

    escalated: bool
    is_final_step: bool
    escalated_to: AssignmentTarget | None = None
    reason: str | None = None
    step_index: int | None = None
