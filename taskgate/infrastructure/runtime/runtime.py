"""In-process workflow runtime (implements ISignalSink).

Runs workflow coroutines as asyncio tasks with a WorkflowContext each.
Suitable for development, tests and single-process deployments: state
lives in memory and is lost on restart. Durable hosting needs a real
substrate that provides the same IWorkflowContext primitives.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from taskgate.application.interfaces.services import ITaskActivities
from taskgate.core.config import Settings, get_settings
from taskgate.domain.exceptions import (
    TaskgateException,
    ValidationException,
    WorkflowCancelledException,
    WorkflowNotFoundException,
)
from taskgate.infrastructure.runtime.clock import SystemClock, WorkflowClock
from taskgate.infrastructure.runtime.context import WorkflowContext
from taskgate.infrastructure.services.retrying_activities import RetryingTaskActivities
from taskgate.shared.enums import WorkflowRunStatus
from taskgate.shared.telemetry.logging import get_logger
from taskgate.shared.utils.generators import generate_cuid, generate_run_id

if TYPE_CHECKING:
    from taskgate.application.services.assignment_resolver import AssignmentResolver

logger = get_logger(__name__)

WorkflowFn = Callable[..., Awaitable[Any]]


@dataclass
class WorkflowHandle:
    """A started workflow run."""

    workflow_id: str
    run_id: str
    context: WorkflowContext
    task: asyncio.Task
    started_at: datetime

    @property
    def status(self) -> WorkflowRunStatus:
        if not self.task.done():
            return WorkflowRunStatus.RUNNING
        if self.task.cancelled():
            return WorkflowRunStatus.CANCELLED
        exc = self.task.exception()
        if isinstance(exc, WorkflowCancelledException):
            return WorkflowRunStatus.CANCELLED
        if exc is not None:
            return WorkflowRunStatus.FAILED
        return WorkflowRunStatus.COMPLETED

    @property
    def error(self) -> BaseException | None:
        if not self.task.done() or self.task.cancelled():
            return None
        return self.task.exception()


class InProcessWorkflowRuntime:
    """Starts workflows, routes signals to them and cancels them."""

    def __init__(
        self,
        activities: ITaskActivities,
        *,
        resolver: AssignmentResolver | None = None,
        clock: WorkflowClock | None = None,
        settings: Settings | None = None,
        retry_activities: bool = True,
    ) -> None:
        """Initialize.

        Args:
            activities: Task provider; wrapped with the retry policy unless retry_activities is False.
            resolver: Assignment resolver exposed to workflows as ctx.resolver.
            clock: Time source (SystemClock by default; ManualClock in tests).
            settings: Settings override.
            retry_activities: Whether to apply RetryingTaskActivities.
        """
        self.settings = settings or get_settings()
        if retry_activities:
            activities = RetryingTaskActivities(activities, self.settings)
        self.activities = activities
        self.resolver = resolver
        self.clock = clock or SystemClock()
        self._handles: dict[str, WorkflowHandle] = {}

    async def start(
        self,
        workflow: WorkflowFn,
        *args: Any,
        workflow_id: str | None = None,
        **kwargs: Any,
    ) -> WorkflowHandle:
        """Start workflow(ctx, *args, **kwargs) and return its handle.

        Raises:
            ValidationException: A run with the same workflow id is still running.
        """
        workflow_id = workflow_id or f"wf_{generate_cuid()}"
        existing = self._handles.get(workflow_id)
        if existing is not None and existing.status is WorkflowRunStatus.RUNNING:
            raise ValidationException(f"Workflow {workflow_id} is already running", "workflow_id")
        ctx = WorkflowContext(
            workflow_id,
            generate_run_id(),
            self.clock,
            self.activities,
            resolver=self.resolver,
            settings=self.settings,
        )
        task = asyncio.create_task(
            self._run(ctx, workflow, args, kwargs), name=f"workflow:{workflow_id}"
        )
        handle = WorkflowHandle(workflow_id, ctx.run_id, ctx, task, self.clock.now())
        self._handles.pop(workflow_id, None)
        self._evict_finished()
        self._handles[workflow_id] = handle
        return handle

    def _evict_finished(self) -> None:
        """Forget the oldest finished runs beyond finished_workflow_retention."""
        finished = [wid for wid, h in self._handles.items() if h.task.done()]
        excess = len(finished) - self.settings.finished_workflow_retention
        if excess <= 0:
            return
        for workflow_id in finished[:excess]:
            del self._handles[workflow_id]
        logger.debug("Evicted %d finished workflows", excess)

    async def _run(
        self,
        ctx: WorkflowContext,
        workflow: WorkflowFn,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        logger.info("Workflow %s started (run %s)", ctx.workflow_id, ctx.run_id)
        try:
            result = await workflow(ctx, *args, **kwargs)
        except WorkflowCancelledException:
            logger.info("Workflow %s cancelled", ctx.workflow_id)
            raise
        except TaskgateException as e:
            logger.warning("Workflow %s failed: %s (%s)", ctx.workflow_id, e.message, e.error_code)
            raise
        except Exception:
            logger.exception("Workflow %s failed with unexpected error", ctx.workflow_id)
            raise
        logger.info("Workflow %s completed", ctx.workflow_id)
        return result

    def get_handle(self, workflow_id: str) -> WorkflowHandle:
        handle = self._handles.get(workflow_id)
        if handle is None:
            raise WorkflowNotFoundException(workflow_id)
        return handle

    def list_handles(self) -> list[WorkflowHandle]:
        return list(self._handles.values())

    async def signal(self, workflow_id: str, name: str, payload: Any) -> None:
        """Deliver a signal; signals to finished workflows are dropped."""
        handle = self.get_handle(workflow_id)
        if handle.task.done():
            logger.info("Workflow %s already finished; dropping signal %s", workflow_id, name)
            return
        logger.debug("Signal %s -> workflow %s", name, workflow_id)
        handle.context.deliver_signal(name, payload)

    async def cancel(self, workflow_id: str) -> None:
        """Request cancellation; the workflow sees WorkflowCancelledException at its next wait."""
        handle = self.get_handle(workflow_id)
        if handle.task.done():
            return
        logger.info("Cancelling workflow %s", workflow_id)
        handle.context.cancel()

    async def result(self, workflow_id: str) -> Any:
        """Wait for the workflow and return its result (or raise its error)."""
        return await self.get_handle(workflow_id).task

    async def shutdown(self) -> None:
        """Cancel every running workflow task and wait for them to finish."""
        running = [h.task for h in self._handles.values() if not h.task.done()]
        for task in running:
            task.cancel()
        if running:
            await asyncio.gather(*running, return_exceptions=True)
            logger.info("Runtime shut down (%d workflows interrupted)", len(running))
