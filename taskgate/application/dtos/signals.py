"""Signal payloads delivered to waiting workflows.

Wire format uses camelCase (taskId, completedBy); Python code uses the
snake_case attribute names. Both are accepted on input.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _SignalModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class TaskCompletedSignal(_SignalModel):
    """taskCompleted: a human submitted the task form."""

    task_id: str
    data: dict[str, Any] = Field(default_factory=dict)
    completed_by: str
    completed_at: datetime


class TaskCancelledSignal(_SignalModel):
    """taskCancelled: the task was cancelled outside the workflow."""

    task_id: str
    reason: str | None = None
    cancelled_by: str | None = None
