"""Service interfaces (ports) for the application layer.

Protocols define contracts for task activities, the workflow substrate
and assignment strategies (DIP).
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from taskgate.application.dtos.task import CreateTaskInput
    from taskgate.domain.value_objects.core import AssignmentTarget

SignalHandler = Callable[[Any], bool | None]


class ITaskActivities(Protocol):
    """Side effects on task records, executed outside the workflow.

    Implementations may be retried (see RetryingTaskActivities), so each
    call must be safe to repeat.
    """

    async def create_task(self, task_input: CreateTaskInput) -> str:
        """Persist a task and return its id."""

    async def reassign_task(self, task_id: str, target: AssignmentTarget) -> None:
        """Move the task to a new person or group."""

    async def notify_task_urgent(self, task_id: str, message: str | None = None) -> None:
        """Send an urgent notification for the task (priority bump)."""

    async def escalate_task(
        self, task_id: str, target: AssignmentTarget | None = None
    ) -> None:
        """Escalate the task, optionally to a specific target."""

    async def cancel_task(self, task_id: str, reason: str | None = None) -> None:
        """Mark the task cancelled."""


class IAssignmentStrategy(Protocol):
    """Picks one member of a group, or None."""

    name: str

    async def select_member(self, group_id: str) -> str | None:
        """Return the chosen member id, or None when nobody is eligible."""


class ISignalSink(Protocol):
    """Delivers named signals to a running workflow."""

    async def signal(self, workflow_id: str, name: str, payload: Any) -> None:
        """Deliver payload under the signal name to the workflow."""


class IWorkflowContext(Protocol):
    """Substrate primitives visible to workflow code.

    Workflow code reads time only via now() and suspends only in
    condition() and sleep_until(); both raise WorkflowCancelledException
    once the workflow is cancelled.
    """

    workflow_id: str
    run_id: str

    def now(self) -> datetime:
        """Deterministic current time."""

    async def sleep_until(self, when: datetime) -> None:
        """Suspend until the clock reaches when."""

    async def condition(
        self, predicate: Callable[[], bool], deadline: datetime | None = None
    ) -> bool:
        """Suspend until predicate() is true (True) or deadline passes (False)."""

    def set_signal_handler(self, name: str, handler: SignalHandler) -> Callable[[], None]:
        """Register a handler for a named signal; returns an unregister callable.

        Signals received before registration are replayed to the handler.
        A handler that returns True claims the payload: it is not buffered
        for, or replayed to, handlers registered later.
        """

    @property
    def activities(self) -> ITaskActivities:
        """Task activities bound to this workflow."""


class INotificationService(Protocol):
    """Sends task notifications (urgent nudges, escalations) to recipients."""

    async def send(self, recipients: list[str], subject: str, body: str) -> None:
        """Send a notification to user/group ids. No-op or log if not configured."""
