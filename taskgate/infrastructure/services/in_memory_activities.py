"""In-memory task provider (implements ITaskActivities) for development and tests.

Stores task records in a dict, notifies through an INotificationService
and, when a human completes or cancels a task, validates the submission
against the task form and signals the owning workflow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from taskgate.application.dtos.signals import TaskCancelledSignal, TaskCompletedSignal
from taskgate.application.dtos.task import CreateTaskInput
from taskgate.application.interfaces.services import INotificationService, ISignalSink
from taskgate.application.services.form_validator import (
    apply_defaults,
    validate_form_data_or_raise,
)
from taskgate.core.config import Settings, get_settings
from taskgate.core.constants import ACTIVE_TASK_STATUSES
from taskgate.domain.enums import TaskPriority
from taskgate.domain.exceptions import ResourceNotFoundException, ValidationException
from taskgate.domain.value_objects.core import AssignmentTarget, FormSchema
from taskgate.shared.enums import TaskStatus
from taskgate.shared.telemetry.logging import get_logger
from taskgate.shared.utils.datetime import utc_now
from taskgate.shared.utils.generators import generate_task_id

logger = get_logger(__name__)

_TERMINAL = (TaskStatus.COMPLETED, TaskStatus.CANCELLED)


@dataclass
class TaskRecord:
    """A stored human task."""

    id: str
    workflow_id: str
    run_id: str
    title: str
    form: FormSchema
    status: TaskStatus
    priority: TaskPriority
    created_at: datetime
    assigned_person: str | None = None
    assigned_group: str | None = None
    description: str | None = None
    context: dict[str, Any] = field(default_factory=dict)
    conversation_id: str | None = None
    due_at: datetime | None = None
    warn_before_minutes: int | None = None
    type: str = "default"
    metadata: dict[str, Any] = field(default_factory=dict)
    completed_at: datetime | None = None
    completed_by: str | None = None
    result: dict[str, Any] | None = None
    cancel_reason: str | None = None
    escalation_count: int = 0
    history: list[dict[str, Any]] = field(default_factory=list)

    @property
    def recipients(self) -> list[str]:
        return [r for r in (self.assigned_person, self.assigned_group) if r]


class InMemoryTaskActivities:
    """Task store kept in process memory."""

    def __init__(
        self,
        notifier: INotificationService,
        signal_sink: ISignalSink | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.notifier = notifier
        self.signal_sink = signal_sink
        self.settings = settings or get_settings()
        self._tasks: dict[str, TaskRecord] = {}

    def attach_signal_sink(self, sink: ISignalSink) -> None:
        """Set where completion/cancellation signals are delivered (the runtime)."""
        self.signal_sink = sink

    def _get(self, task_id: str) -> TaskRecord:
        task = self._tasks.get(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        return task

    def _record(self, task: TaskRecord, event: str, **details: Any) -> None:
        task.history.append({"event": event, "at": utc_now().isoformat(), **details})

    # Activities

    async def create_task(self, task_input: CreateTaskInput) -> str:
        target = task_input.assign_to
        task = TaskRecord(
            id=generate_task_id(),
            workflow_id=task_input.workflow_id,
            run_id=task_input.run_id,
            title=task_input.title,
            form=task_input.form,
            status=TaskStatus.ASSIGNED if target and target.person else TaskStatus.PENDING,
            priority=task_input.priority,
            created_at=utc_now(),
            assigned_person=target.person if target else None,
            assigned_group=target.group if target else None,
            description=task_input.description,
            context=dict(task_input.context),
            conversation_id=task_input.conversation_id,
            due_at=task_input.due_at,
            warn_before_minutes=task_input.warn_before_minutes,
            type=task_input.type,
            metadata=dict(task_input.metadata),
        )
        self._tasks[task.id] = task
        self._record(task, "created")
        logger.info(
            "Task %s created for workflow %s (assignee=%s, group=%s)",
            task.id, task.workflow_id, task.assigned_person, task.assigned_group,
        )
        return task.id

    async def reassign_task(self, task_id: str, target: AssignmentTarget) -> None:
        task = self._get(task_id)
        task.assigned_person = target.person
        task.assigned_group = target.group or task.assigned_group
        if task.status not in _TERMINAL:
            task.status = TaskStatus.ASSIGNED if target.person else TaskStatus.PENDING
        self._record(task, "reassigned", target=target.to_dict())
        logger.info("Task %s reassigned to %s", task_id, target.describe())

    async def notify_task_urgent(self, task_id: str, message: str | None = None) -> None:
        task = self._get(task_id)
        task.priority = TaskPriority.URGENT
        self._record(task, "notified", message=message)
        await self.notifier.send(
            task.recipients,
            f"Urgent: {task.title}",
            message or "This task needs your attention",
        )

    async def escalate_task(self, task_id: str, target: AssignmentTarget | None = None) -> None:
        task = self._get(task_id)
        task.priority = TaskPriority.URGENT
        task.escalation_count += 1
        if target is not None:
            task.assigned_person = target.person
            task.assigned_group = target.group or task.assigned_group
            if task.status not in _TERMINAL:
                task.status = TaskStatus.ASSIGNED if target.person else TaskStatus.PENDING
        self._record(task, "escalated", target=target.to_dict() if target else None)
        await self.notifier.send(
            task.recipients,
            f"Escalated: {task.title}",
            "This task has been escalated to you",
        )

    async def cancel_task(self, task_id: str, reason: str | None = None) -> None:
        task = self._get(task_id)
        if task.status in _TERMINAL:
            logger.debug("Task %s already %s; cancel ignored", task_id, task.status.value)
            return
        task.status = TaskStatus.CANCELLED
        task.cancel_reason = reason
        self._record(task, "cancelled", reason=reason)
        logger.info("Task %s cancelled: %s", task_id, reason or "no reason")

    # Human side

    async def complete_task(
        self,
        task_id: str,
        data: dict[str, Any],
        completed_by: str,
    ) -> TaskRecord:
        """Validate a submission, mark the task completed and signal its workflow.

        Raises:
            ResourceNotFoundException: Unknown task.
            ValidationException: Task is already completed or cancelled.
            FormValidationException: Data does not satisfy the task form.
        """
        task = self._get(task_id)
        if task.status in _TERMINAL:
            raise ValidationException(f"Task {task_id} is already {task.status.value}", "status")
        cleaned = validate_form_data_or_raise(task.form, apply_defaults(task.form, data))
        task.status = TaskStatus.COMPLETED
        task.completed_at = utc_now()
        task.completed_by = completed_by
        task.result = cleaned
        self._record(task, "completed", completed_by=completed_by)
        signal = TaskCompletedSignal(
            task_id=task_id,
            data=cleaned,
            completed_by=completed_by,
            completed_at=task.completed_at,
        )
        await self._signal(task, self.settings.signal_task_completed, signal)
        return task

    async def request_cancellation(
        self,
        task_id: str,
        reason: str | None = None,
        cancelled_by: str | None = None,
    ) -> TaskRecord:
        """Cancel a task from outside its workflow and signal the workflow."""
        task = self._get(task_id)
        if task.status in _TERMINAL:
            raise ValidationException(f"Task {task_id} is already {task.status.value}", "status")
        task.status = TaskStatus.CANCELLED
        task.cancel_reason = reason
        self._record(task, "cancelled", reason=reason, cancelled_by=cancelled_by)
        signal = TaskCancelledSignal(task_id=task_id, reason=reason, cancelled_by=cancelled_by)
        await self._signal(task, self.settings.signal_task_cancelled, signal)
        return task

    async def _signal(self, task: TaskRecord, name: str, signal: Any) -> None:
        if self.signal_sink is None:
            logger.warning("No signal sink attached; %s for task %s not delivered", name, task.id)
            return
        await self.signal_sink.signal(task.workflow_id, name, signal.model_dump(by_alias=True, mode="json"))

    # Queries

    def get_task(self, task_id: str) -> TaskRecord:
        return self._get(task_id)

    def list_tasks(self, workflow_id: str | None = None) -> list[TaskRecord]:
        tasks = list(self._tasks.values())
        if workflow_id is not None:
            tasks = [t for t in tasks if t.workflow_id == workflow_id]
        return tasks

    def count_active_by_user(self, user_ids: list[str]) -> dict[str, int]:
        """Open task counts per user (pending, assigned, in_progress)."""
        counts = {user_id: 0 for user_id in user_ids}
        for task in self._tasks.values():
            if task.assigned_person in counts and task.status.value in ACTIVE_TASK_STATUSES:
                counts[task.assigned_person] += 1
        return counts
