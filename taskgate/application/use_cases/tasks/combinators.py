"""Wait on several human tasks at once.

all_tasks needs every task to complete and fails fast on the first
cancellation. any_task returns the first completion and only fails when
every task has failed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import replace

from taskgate.application.dtos.task import TaskOptions, TaskResult
from taskgate.application.interfaces.services import IWorkflowContext
from taskgate.application.use_cases.tasks.human_task import run_task
from taskgate.domain.exceptions import TaskCancelledException
from taskgate.domain.value_objects.core import SLAConfig
from taskgate.shared.telemetry.logging import get_logger
from taskgate.shared.telemetry.tracing import traced

logger = get_logger(__name__)


def _with_sla(configs: Sequence[TaskOptions], sla: SLAConfig | None) -> list[TaskOptions]:
    if sla is None:
        return list(configs)
    return [c if c.sla is not None else replace(c, sla=sla) for c in configs]


def _start(
    ctx: IWorkflowContext, configs: Sequence[TaskOptions], created: dict[int, str]
) -> list[asyncio.Task]:
    def recorder(index: int):
        def record(task_id: str) -> None:
            created[index] = task_id

        return record

    return [
        asyncio.create_task(run_task(ctx, options, on_created=recorder(i)))
        for i, options in enumerate(configs)
    ]


async def _stop(waits: Sequence[asyncio.Task]) -> None:
    pending = [w for w in waits if not w.done()]
    for w in pending:
        w.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


async def _cancel_created(
    ctx: IWorkflowContext, task_ids: Sequence[str], reason: str
) -> None:
    for task_id in task_ids:
        try:
            await ctx.activities.cancel_task(task_id, reason)
        except Exception as e:
            logger.warning("Failed to cancel task %s: %s", task_id, e)


@traced("task.all")
async def all_tasks(
    ctx: IWorkflowContext,
    configs: Sequence[TaskOptions],
    sla: SLAConfig | None = None,
    cancel_remaining_on_failure: bool = False,
) -> list[TaskResult]:
    """Create every task concurrently and wait for all of them.

    Args:
        ctx: Workflow context.
        configs: One TaskOptions per task.
        sla: Shared SLA for tasks that do not define their own.
        cancel_remaining_on_failure: Also cancel the sibling tasks in the
            provider when one fails. By default they are left open.

    Returns:
        Results in the order of configs.

    Raises:
        The first failure (e.g. TaskCancelledException), as soon as it happens.
    """
    if not configs:
        return []
    created: dict[int, str] = {}
    waits = _start(ctx, _with_sla(configs, sla), created)
    try:
        done, _ = await asyncio.wait(waits, return_when=asyncio.FIRST_EXCEPTION)
        failed = next((w for w in waits if w in done and w.exception() is not None), None)
        if failed is not None:
            error = failed.exception()
            index = waits.index(failed)
            logger.info("all_tasks: task #%d failed (%s); aborting", index + 1, error)
            await _stop(waits)
            if cancel_remaining_on_failure:
                siblings = [
                    created[i] for i, w in enumerate(waits) if i != index and i in created
                ]
                await _cancel_created(ctx, siblings, "Sibling task failed")
            raise error
        return [w.result() for w in waits]
    finally:
        await _stop(waits)


@traced("task.any")
async def any_task(
    ctx: IWorkflowContext,
    configs: Sequence[TaskOptions],
    sla: SLAConfig | None = None,
    cancel_remaining: bool = False,
) -> TaskResult:
    """Create every task concurrently and return the first completion.

    Cancelled tasks are tolerated while another may still complete.

    Args:
        ctx: Workflow context.
        configs: One TaskOptions per task.
        sla: Shared SLA for tasks that do not define their own.
        cancel_remaining: Cancel the still-open tasks once one completes.

    Raises:
        The first failure, when every task has failed. Anything other than
        TaskCancelledException (workflow cancellation included) is raised
        immediately.
    """
    if not configs:
        raise ValueError("any_task needs at least one task")
    created: dict[int, str] = {}
    waits = _start(ctx, _with_sla(configs, sla), created)
    failures: list[BaseException] = []
    try:
        pending = set(waits)
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for w in sorted(done, key=waits.index):
                error = w.exception()
                if error is None:
                    winner = waits.index(w)
                    if cancel_remaining:
                        open_ids = [
                            created[i]
                            for i, other in enumerate(waits)
                            if i != winner and i in created and other in pending
                        ]
                        await _stop(waits)
                        await _cancel_created(ctx, open_ids, "Another task completed first")
                    return w.result()
                if not isinstance(error, TaskCancelledException):
                    raise error
                logger.info("any_task: task #%d cancelled; %d still open", waits.index(w) + 1, len(pending))
                failures.append(error)
        raise failures[0]
    finally:
        await _stop(waits)
