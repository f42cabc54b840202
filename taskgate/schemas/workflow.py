"""Workflow API schemas (status, signals)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskgate.shared.enums import WorkflowRunStatus


class WorkflowStatusResponse(BaseModel):
    """Response for GET /workflows/{workflow_id}."""

    workflow_id: str
    run_id: str
    status: WorkflowRunStatus
    started_at: datetime
    error: dict[str, Any] | None = Field(
        default=None, description="Error payload when the workflow failed or was cancelled"
    )


class TaskCompletedSignalRequest(BaseModel):
    """Body of POST /workflows/{workflow_id}/signals/task-completed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    task_id: str
    data: dict[str, Any] = Field(default_factory=dict)
    completed_by: str
    completed_at: datetime | None = Field(
        default=None, description="Defaults to the time the signal is received; naive values are read as UTC"
    )


class TaskCancelledSignalRequest(BaseModel):
    """Body of POST /workflows/{workflow_id}/signals/task-cancelled."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    task_id: str
    reason: str | None = None
    cancelled_by: str | None = None


class SignalAcceptedResponse(BaseModel):
    """Response for signal and cancel requests (202)."""

    workflow_id: str
    accepted: bool = True
