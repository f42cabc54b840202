"""DTOs for human tasks (no dependency on ORM or runtime)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from taskgate.domain.enums import AssignmentStrategyType, TaskPriority
from taskgate.domain.value_objects.core import AssignmentTarget, FormSchema, SLAConfig


@dataclass(frozen=True)
class TaskOptions:
    """What a workflow asks for when it waits on a human task."""

    title: str
    assign_to: AssignmentTarget
    form: FormSchema = field(default_factory=FormSchema)
    description: str | None = None
    context: dict[str, Any] = field(default_factory=dict)
    conversation_id: str | None = None
    sla: SLAConfig | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    type: str = "default"
    metadata: dict[str, Any] = field(default_factory=dict)
    strategy: str | None = None


@dataclass(frozen=True)
class CreateTaskInput:
    """Payload of the create_task activity."""

    workflow_id: str
    run_id: str
    title: str
    form: FormSchema
    assign_to: AssignmentTarget | None
    description: str | None = None
    context: dict[str, Any] = field(default_factory=dict)
    conversation_id: str | None = None
    due_at: datetime | None = None
    warn_before_minutes: int | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    type: str = "default"
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TaskResult:
    """Outcome of a completed task."""

    task_id: str
    data: dict[str, Any]
    completed_by: str
    completed_at: datetime


@dataclass(frozen=True)
class ResolvedAssignment:
    """Result of assignment resolution.

    Both ids None means "unassigned"; the task provider decides what that
    means (e.g. a shared inbox).
    """

    person_id: str | None
    group_id: str | None
    strategy: AssignmentStrategyType | str

    @property
    def is_unassigned(self) -> bool:
        return self.person_id is None and self.group_id is None

    def as_target(self) -> AssignmentTarget | None:
        """Return the assignment as a target, or None when unassigned."""
        if self.is_unassigned:
            return None
        return AssignmentTarget(person=self.person_id, group=self.group_id)
