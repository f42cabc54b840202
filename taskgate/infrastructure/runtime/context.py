"""Workflow context for the in-process runtime (implements IWorkflowContext).

One context per workflow run. Unclaimed signals are kept in a bounded
per-workflow inbox and replayed to handlers registered later, so a signal
that arrives before the workflow starts listening is not lost. Handlers
are a broadcast list per signal name; each waiter claims the signals for
its own task id.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from taskgate.application.interfaces.services import ITaskActivities, SignalHandler
from taskgate.core.config import Settings, get_settings
from taskgate.domain.exceptions import WorkflowCancelledException
from taskgate.infrastructure.runtime.clock import WorkflowClock
from taskgate.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from taskgate.application.services.assignment_resolver import AssignmentResolver

logger = get_logger(__name__)


class _Waiter:
    __slots__ = ("predicate", "future")

    def __init__(self, predicate: Callable[[], bool], future: asyncio.Future) -> None:
        self.predicate = predicate
        self.future = future


class WorkflowContext:
    """Substrate primitives for one workflow run."""

    def __init__(
        self,
        workflow_id: str,
        run_id: str,
        clock: WorkflowClock,
        activities: ITaskActivities,
        *,
        resolver: AssignmentResolver | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.workflow_id = workflow_id
        self.run_id = run_id
        self.resolver = resolver
        self.settings = settings or get_settings()
        self._clock = clock
        self._activities = activities
        self._handlers: dict[str, list[SignalHandler]] = defaultdict(list)
        self._inbox: dict[str, list[Any]] = defaultdict(list)
        self._waiters: list[_Waiter] = []
        self._cancelled = False

    @property
    def activities(self) -> ITaskActivities:
        return self._activities

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def now(self) -> datetime:
        return self._clock.now()

    def _raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise WorkflowCancelledException(self.workflow_id)

    def _wake(self) -> None:
        for waiter in list(self._waiters):
            if not waiter.future.done() and waiter.predicate():
                waiter.future.set_result(True)

    def set_signal_handler(self, name: str, handler: SignalHandler) -> Callable[[], None]:
        """Register handler for name and replay buffered signals to it.

        Payloads the handler claims (returns True for) leave the inbox.
        """
        self._handlers[name].append(handler)
        inbox = self._inbox[name]
        inbox[:] = [payload for payload in list(inbox) if not handler(payload)]
        self._wake()

        def unregister() -> None:
            if handler in self._handlers[name]:
                self._handlers[name].remove(handler)

        return unregister

    def deliver_signal(self, name: str, payload: Any) -> None:
        """Dispatch a signal to current handlers; buffer it unless one claims it."""
        if self._cancelled:
            logger.debug("Workflow %s cancelled; dropping signal %s", self.workflow_id, name)
            return
        claimed = False
        for handler in list(self._handlers[name]):
            if handler(payload):
                claimed = True
        if not claimed:
            self._buffer(name, payload)
        self._wake()

    def _buffer(self, name: str, payload: Any) -> None:
        inbox = self._inbox[name]
        inbox.append(payload)
        if len(inbox) > self.settings.signal_inbox_limit:
            dropped = inbox.pop(0)
            logger.warning(
                "Workflow %s inbox for %s is full; dropping oldest unclaimed signal %r",
                self.workflow_id,
                name,
                dropped,
            )

    def buffered_signals(self, name: str) -> int:
        """Number of unclaimed signals held for name."""
        return len(self._inbox.get(name, ()))

    def cancel(self) -> None:
        """Cancel the workflow: every current and future wait raises WorkflowCancelledException."""
        if self._cancelled:
            return
        self._cancelled = True
        for waiter in list(self._waiters):
            if not waiter.future.done():
                waiter.future.set_exception(WorkflowCancelledException(self.workflow_id))

    async def condition(
        self, predicate: Callable[[], bool], deadline: datetime | None = None
    ) -> bool:
        """Wait until predicate() holds (True) or the deadline passes (False).

        A None deadline waits indefinitely.

        Raises:
            WorkflowCancelledException: The workflow was cancelled.
        """
        self._raise_if_cancelled()
        if predicate():
            return True
        if deadline is not None and deadline <= self.now():
            return False

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        waiter = _Waiter(predicate, future)
        self._waiters.append(waiter)

        def on_timer() -> None:
            if not future.done():
                future.set_result(False)

        timer = self._clock.call_at(deadline, on_timer) if deadline is not None else None
        try:
            return await future
        finally:
            self._waiters.remove(waiter)
            if timer is not None:
                timer.cancel()

    async def sleep_until(self, when: datetime) -> None:
        await self.condition(lambda: False, when)
