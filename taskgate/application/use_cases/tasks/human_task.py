"""Workflow-facing task operations.

These are the calls a workflow body makes: wait on one task, wait on a
task driven by an escalation chain, and the fire-and-forget helpers for
cancelling, reassigning and flagging a task from inside the workflow.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace

from taskgate.application.dtos.task import TaskOptions, TaskResult
from taskgate.application.dtos.task_wait import TaskWaitState
from taskgate.application.interfaces.services import IWorkflowContext
from taskgate.application.services.assignment_resolver import AssignmentResolver
from taskgate.application.use_cases.tasks.wait_protocol import (
    TaskWaitProtocol,
    TransitionCallback,
)
from taskgate.domain.value_objects.core import AssignmentTarget, EscalationStep
from taskgate.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


async def run_task(
    ctx: IWorkflowContext,
    options: TaskOptions,
    *,
    resolver: AssignmentResolver | None = None,
    on_transition: TransitionCallback | None = None,
    state: TaskWaitState | None = None,
    on_created: Callable[[str], None] | None = None,
) -> TaskResult:
    """Create a human task and wait until it is completed or cancelled.

    Args:
        ctx: Workflow context.
        options: Title, form, assignment and SLA of the task.
        resolver: Assignment resolver; defaults to the one the runtime exposes on ctx.
        on_transition: Receives a TaskWaitState snapshot after every state change.
        state: Snapshot to resume from.
        on_created: Receives the task id once the task exists.

    Returns:
        TaskResult with the submitted form data.

    Raises:
        TaskCancelledException: The task was cancelled (signal or SLA cancel).
        WorkflowCancelledException: The workflow was cancelled while waiting.
    """
    protocol = TaskWaitProtocol(
        ctx,
        options,
        resolver=resolver if resolver is not None else getattr(ctx, "resolver", None),
        settings=getattr(ctx, "settings", None),
        on_transition=on_transition,
        on_created=on_created,
    )
    return await protocol.run(state)


async def task_with_escalation(
    ctx: IWorkflowContext,
    options: TaskOptions,
    escalation: Sequence[EscalationStep],
) -> TaskResult:
    """Wait on a task whose reminders and hand-offs come only from a chain.

    The chain replaces any SLA on options: no deadline is set, so no breach
    action runs; every step fires once at its offset until the task resolves.
    """
    options = replace(options, sla=None)
    protocol = TaskWaitProtocol(
        ctx,
        options,
        escalation=escalation,
        resolver=getattr(ctx, "resolver", None),
        settings=getattr(ctx, "settings", None),
    )
    return await protocol.run()


async def cancel_task(ctx: IWorkflowContext, task_id: str, reason: str | None = None) -> None:
    logger.info("Workflow %s cancelling task %s", ctx.workflow_id, task_id)
    await ctx.activities.cancel_task(task_id, reason)


async def reassign_task(ctx: IWorkflowContext, task_id: str, target: AssignmentTarget) -> None:
    logger.info("Workflow %s reassigning task %s to %s", ctx.workflow_id, task_id, target.describe())
    await ctx.activities.reassign_task(task_id, target)


async def notify_urgent(ctx: IWorkflowContext, task_id: str, message: str | None = None) -> None:
    await ctx.activities.notify_task_urgent(task_id, message)
