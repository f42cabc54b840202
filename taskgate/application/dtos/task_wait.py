"""Serializable snapshot of one task wait (checkpoint / resume)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from taskgate.application.dtos.signals import TaskCancelledSignal, TaskCompletedSignal
from taskgate.domain.enums import TaskWaitPhase


class TaskWaitState(BaseModel):
    """State of the task wait state machine at a point in time.

    executed_steps holds indexes into the offset-sorted escalation chain.
    """

    phase: TaskWaitPhase = TaskWaitPhase.CREATED
    task_id: str | None = None
    created_at: datetime | None = None
    due_at: datetime | None = None
    breach_handled: bool = False
    executed_steps: list[int] = Field(default_factory=list)
    completed: TaskCompletedSignal | None = None
    cancelled: TaskCancelledSignal | None = None
