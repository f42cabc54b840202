"""Human task repository (SQL): escalation sweep reads and updates."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.application.dtos.escalation import EscalationCandidate
from taskgate.application.services.escalation_processor import parse_escalation_config
from taskgate.core.constants import ACTIVE_TASK_STATUSES
from taskgate.domain.value_objects.core import AssignmentTarget
from taskgate.infrastructure.persistence.models.task import HumanTask


def _to_candidate(t: HumanTask) -> EscalationCandidate:
    """Map HumanTask ORM to EscalationCandidate DTO."""
    return EscalationCandidate(
        task_id=t.id,
        created_at=t.created_at,
        status=t.status,
        due_at=t.due_at,
        assigned_person=t.assigned_user_id,
        assigned_group=t.assigned_group_id,
        escalation_chain=parse_escalation_config(t.escalation_config) or (),
    )


class HumanTaskRepository:
    """Task repository for the escalation sweep."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_open_with_deadline(self, limit: int = 500) -> list[EscalationCandidate]:
        """Open tasks that have a due date, earliest first."""
        result = await self.db.execute(
            select(HumanTask)
            .where(HumanTask.status.in_(ACTIVE_TASK_STATUSES), HumanTask.due_at.is_not(None))
            .order_by(HumanTask.due_at)
            .limit(limit)
        )
        return [_to_candidate(t) for t in result.scalars().all()]

    async def apply_escalation(self, task_id: str, target: AssignmentTarget | None) -> None:
        """Move the task to target (when given) and bump its escalation count."""
        values: dict = {
            "escalation_count": HumanTask.escalation_count + 1,
            "priority": "urgent",
        }
        if target is not None:
            values["assigned_user_id"] = target.person
            if target.group:
                values["assigned_group_id"] = target.group
            values["status"] = "assigned" if target.person else "pending"
        await self.db.execute(update(HumanTask).where(HumanTask.id == task_id).values(**values))
