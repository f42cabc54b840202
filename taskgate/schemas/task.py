"""Task API schemas (in-memory task provider)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from taskgate.domain.enums import SLAState, TaskPriority
from taskgate.shared.enums import TaskStatus


class TaskResponse(BaseModel):
    """A stored human task."""

    id: str
    workflow_id: str
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    assigned_person: str | None = None
    assigned_group: str | None = None
    created_at: datetime
    due_at: datetime | None = None
    completed_at: datetime | None = None
    completed_by: str | None = None
    result: dict[str, Any] | None = None
    cancel_reason: str | None = None
    escalation_count: int = 0
    form: dict[str, Any] = Field(default_factory=dict, description="Form schema (field name -> field)")


class TaskCompleteRequest(BaseModel):
    """Body of POST /tasks/{task_id}/complete."""

    data: dict[str, Any] = Field(default_factory=dict)
    completed_by: str = Field(..., min_length=1)


class TaskCancelRequest(BaseModel):
    """Body of POST /tasks/{task_id}/cancel."""

    reason: str | None = None
    cancelled_by: str | None = None


class SLAStatusResponse(BaseModel):
    """Response for GET /tasks/{task_id}/sla."""

    task_id: str
    state: SLAState
    breached: bool
    warning: bool
    time_remaining_ms: int
    time_remaining: str
    deadline: datetime
