"""Task wait protocol: create a human task and wait for it to resolve.

State machine (TaskWaitPhase):

    CREATED -> WAITING -> COMPLETED | CANCELLED
    WAITING -> BREACH_HANDLED -> WAITING               (notify / escalate)
    WAITING -> BREACH_HANDLED -> TERMINATED_FAILURE    (cancel)

While WAITING the protocol races the completed/cancelled signals for its
task against the next wake-up: the SLA deadline (until the breach has
been handled once) and the next escalation chain step. The first signal
wins; later and duplicate signals are ignored. The breach action runs
exactly once and the deadline is never re-armed.

Each state change is reported to an optional on_transition callback as a
TaskWaitState snapshot. Passing a snapshot back to run() resumes the wait
without creating the task again or repeating breach / chain actions.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from taskgate.application.dtos.signals import TaskCancelledSignal, TaskCompletedSignal
from taskgate.application.dtos.task import CreateTaskInput, TaskOptions, TaskResult
from taskgate.application.dtos.task_wait import TaskWaitState
from taskgate.application.interfaces.services import IWorkflowContext
from taskgate.application.services.assignment_resolver import AssignmentResolver
from taskgate.application.services.escalation_processor import (
    applicable_step,
    due_steps,
    escalation_reason,
    next_pending_offset,
    sort_chain,
    step_target,
)
from taskgate.application.services.sla_calculator import compute_deadline
from taskgate.core.config import Settings, get_settings
from taskgate.core.constants import MS_PER_MINUTE
from taskgate.domain.enums import BreachAction, EscalationAction, TaskWaitPhase
from taskgate.domain.exceptions import TaskCancelledException, TaskResolutionException
from taskgate.domain.value_objects.core import AssignmentTarget, EscalationStep
from taskgate.shared.telemetry.logging import get_logger
from taskgate.shared.telemetry.tracing import add_span_event, traced
from taskgate.shared.utils.datetime import add_ms, diff_ms
from taskgate.shared.utils.duration import format_duration

logger = get_logger(__name__)

_TRANSITIONS: dict[TaskWaitPhase, frozenset[TaskWaitPhase]] = {
    TaskWaitPhase.CREATED: frozenset({TaskWaitPhase.WAITING}),
    TaskWaitPhase.WAITING: frozenset({
        TaskWaitPhase.COMPLETED,
        TaskWaitPhase.CANCELLED,
        TaskWaitPhase.BREACH_HANDLED,
    }),
    TaskWaitPhase.BREACH_HANDLED: frozenset({
        TaskWaitPhase.WAITING,
        TaskWaitPhase.TERMINATED_FAILURE,
    }),
}

TransitionCallback = Callable[[TaskWaitState], None]


class TaskWaitProtocol:
    """Drives one task from creation to resolution inside a workflow."""

    def __init__(
        self,
        ctx: IWorkflowContext,
        options: TaskOptions,
        *,
        escalation: Sequence[EscalationStep] | None = None,
        resolver: AssignmentResolver | None = None,
        settings: Settings | None = None,
        on_transition: TransitionCallback | None = None,
        on_created: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize.

        Args:
            ctx: Workflow context (clock, signals, activities).
            options: Task to create and its SLA.
            escalation: Chain to run instead of options.sla.escalation_chain.
            resolver: When given, the target is resolved before creation.
            settings: Settings override (signal names, breach texts, default group).
            on_transition: Receives a snapshot after every state change.
            on_created: Receives the task id right after creation.
        """
        self.ctx = ctx
        self.options = options
        self.resolver = resolver
        self.settings = settings or get_settings()
        self.on_transition = on_transition
        self.on_created = on_created
        chain = escalation if escalation is not None else (
            options.sla.escalation_chain if options.sla else ()
        )
        self.chain: list[EscalationStep] = sort_chain(chain)
        self.state = TaskWaitState()

    # State

    def _checkpoint(self) -> None:
        if self.on_transition is not None:
            self.on_transition(self.state.model_copy(deep=True))

    def _transition(self, phase: TaskWaitPhase) -> None:
        current = self.state.phase
        if phase not in _TRANSITIONS.get(current, frozenset()):
            raise TaskResolutionException(
                self.state.task_id,
                f"Illegal task wait transition {current.value} -> {phase.value}",
            )
        logger.debug("Task %s: %s -> %s", self.state.task_id, current.value, phase.value)
        self.state.phase = phase
        self._checkpoint()

    def _resolved(self) -> bool:
        return self.state.completed is not None or self.state.cancelled is not None

    # Signals

    def _parse(self, model: type, payload: Any) -> Any:
        """Return the signal if it is well-formed and for this task, else None."""
        try:
            signal = model.model_validate(payload)
        except ValidationError:
            logger.warning("Ignoring malformed %s payload: %r", model.__name__, payload)
            return None
        if signal.task_id != self.state.task_id:
            return None
        return signal

    def _on_completed(self, payload: Any) -> bool:
        signal = self._parse(TaskCompletedSignal, payload)
        if signal is None:
            return False
        if self._resolved():
            logger.debug("Task %s already resolved; ignoring completion", signal.task_id)
        else:
            self.state.completed = signal
        return True

    def _on_cancelled(self, payload: Any) -> bool:
        signal = self._parse(TaskCancelledSignal, payload)
        if signal is None:
            return False
        if self._resolved():
            logger.debug("Task %s already resolved; ignoring cancellation", signal.task_id)
        else:
            self.state.cancelled = signal
        return True

    def _listen(self) -> Callable[[], None]:
        remove_completed = self.ctx.set_signal_handler(
            self.settings.signal_task_completed, self._on_completed
        )
        remove_cancelled = self.ctx.set_signal_handler(
            self.settings.signal_task_cancelled, self._on_cancelled
        )

        def remove() -> None:
            remove_completed()
            remove_cancelled()

        return remove

    # Steps

    async def _create(self) -> None:
        options = self.options
        created_at = self.ctx.now()
        target: AssignmentTarget | None = options.assign_to
        if self.resolver is not None:
            resolved = await self.resolver.resolve(options.assign_to, options.strategy)
            target = resolved.as_target()
        due_at = None
        warn_minutes = None
        if options.sla is not None:
            due_at = compute_deadline(created_at, options.sla.deadline)
            if options.sla.warn_before_ms is not None:
                warn_minutes = options.sla.warn_before_ms // MS_PER_MINUTE
        task_id = await self.ctx.activities.create_task(
            CreateTaskInput(
                workflow_id=self.ctx.workflow_id,
                run_id=self.ctx.run_id,
                title=options.title,
                form=options.form,
                assign_to=target,
                description=options.description,
                context=options.context,
                conversation_id=options.conversation_id,
                due_at=due_at,
                warn_before_minutes=warn_minutes,
                priority=options.priority,
                type=options.type,
                metadata=options.metadata,
            )
        )
        self.state.task_id = task_id
        self.state.created_at = created_at
        self.state.due_at = due_at
        logger.info(
            "Task %s created in workflow %s (due %s)",
            task_id, self.ctx.workflow_id, due_at.isoformat() if due_at else "never",
        )
        self._checkpoint()
        if self.on_created is not None:
            self.on_created(task_id)

    def _next_wake(self) -> datetime | None:
        candidates: list[datetime] = []
        if self.state.due_at is not None and not self.state.breach_handled:
            candidates.append(self.state.due_at)
        offset = next_pending_offset(self.chain, self.state.executed_steps)
        if offset is not None:
            candidates.append(add_ms(self.state.created_at, offset))
        return min(candidates) if candidates else None

    async def _execute_step(self, index: int, step: EscalationStep, elapsed_ms: int) -> None:
        task_id = self.state.task_id
        activities = self.ctx.activities
        logger.info(
            "Task %s escalation step %d: %s",
            task_id, index, escalation_reason(step, format_duration(elapsed_ms, short=True)),
        )
        add_span_event("task.escalation_step", {"task_id": task_id, "action": step.action.value})
        if step.action is EscalationAction.REASSIGN:
            if step.target is None:
                logger.warning("Task %s: reassign step %d has no target; skipped", task_id, index)
            else:
                await activities.reassign_task(task_id, step.target)
        elif step.action is EscalationAction.NOTIFY:
            await activities.notify_task_urgent(task_id, step.message)
        else:
            await activities.escalate_task(task_id, step.target)

    async def _run_due_steps(self, now: datetime) -> None:
        elapsed = diff_ms(now, self.state.created_at)
        for index, step in due_steps(self.chain, elapsed, self.state.executed_steps):
            if self._resolved():
                return
            await self._execute_step(index, step, elapsed)
            self.state.executed_steps.append(index)
            self._checkpoint()

    def _breach_target(self, elapsed_ms: int) -> AssignmentTarget | None:
        sla = self.options.sla
        default = sla.escalate_to if sla is not None else None
        if default is None and self.settings.default_escalation_group:
            default = AssignmentTarget.to_group(self.settings.default_escalation_group)
        return step_target(applicable_step(self.chain, elapsed_ms), default)

    async def _handle_breach(self, now: datetime) -> None:
        sla = self.options.sla
        task_id = self.state.task_id
        elapsed = diff_ms(now, self.state.created_at)
        self.state.breach_handled = True
        self._transition(TaskWaitPhase.BREACH_HANDLED)
        logger.warning(
            "Task %s breached its SLA after %s (on_breach=%s)",
            task_id, format_duration(elapsed, short=True), sla.on_breach.value,
        )
        add_span_event("sla.breached", {"task_id": task_id, "action": sla.on_breach.value})

        if sla.on_breach is BreachAction.CANCEL:
            reason = self.settings.breach_cancel_reason
            await self.ctx.activities.cancel_task(task_id, reason)
            self._transition(TaskWaitPhase.TERMINATED_FAILURE)
            raise TaskCancelledException(task_id, reason, sla_breach=True)
        if sla.on_breach is BreachAction.NOTIFY:
            await self.ctx.activities.notify_task_urgent(task_id, self.settings.breach_notify_message)
        else:
            target = self._breach_target(elapsed)
            logger.info(
                "Task %s: %s", task_id,
                escalation_reason(None, format_duration(elapsed, short=True), target),
            )
            await self.ctx.activities.escalate_task(task_id, target)
        self._transition(TaskWaitPhase.WAITING)

    def _finish(self) -> TaskResult:
        task_id = self.state.task_id
        cancelled = self.state.cancelled
        if cancelled is not None:
            self._transition(TaskWaitPhase.CANCELLED)
            logger.info("Task %s cancelled: %s", task_id, cancelled.reason or "no reason")
            raise TaskCancelledException(task_id, cancelled.reason, cancelled.cancelled_by)
        completed = self.state.completed
        if completed is not None:
            self._transition(TaskWaitPhase.COMPLETED)
            logger.info("Task %s completed by %s", task_id, completed.completed_by)
            return TaskResult(
                task_id=completed.task_id,
                data=dict(completed.data),
                completed_by=completed.completed_by,
                completed_at=completed.completed_at,
            )
        raise TaskResolutionException(task_id)

    def _replay_terminal(self) -> TaskResult:
        state = self.state
        if state.phase is TaskWaitPhase.COMPLETED and state.completed is not None:
            c = state.completed
            return TaskResult(c.task_id, dict(c.data), c.completed_by, c.completed_at)
        if state.phase is TaskWaitPhase.CANCELLED and state.cancelled is not None:
            raise TaskCancelledException(state.task_id, state.cancelled.reason, state.cancelled.cancelled_by)
        if state.phase is TaskWaitPhase.TERMINATED_FAILURE:
            raise TaskCancelledException(state.task_id, self.settings.breach_cancel_reason, sla_breach=True)
        raise TaskResolutionException(state.task_id)

    # Entry point

    @traced("task.wait")
    async def run(self, state: TaskWaitState | None = None) -> TaskResult:
        """Create (or resume) the task and wait for it.

        Returns:
            TaskResult on completion.

        Raises:
            TaskCancelledException: Cancelled by signal or by an SLA cancel breach.
            TaskResolutionException: The wait ended with no payload, or an illegal transition.
            WorkflowCancelledException: The enclosing workflow was cancelled.
        """
        if state is not None:
            self.state = state.model_copy(deep=True)
            if self.state.phase.is_terminal:
                return self._replay_terminal()
        if self.state.task_id is None:
            await self._create()
        else:
            logger.info("Resuming wait on task %s (%s)", self.state.task_id, self.state.phase.value)

        remove = self._listen()
        try:
            if self.state.phase is TaskWaitPhase.CREATED:
                self._transition(TaskWaitPhase.WAITING)
            elif self.state.phase is TaskWaitPhase.BREACH_HANDLED:
                if self.options.sla is not None and self.options.sla.on_breach is BreachAction.CANCEL:
                    # provider cancel is idempotent; the snapshot may predate it
                    await self.ctx.activities.cancel_task(
                        self.state.task_id, self.settings.breach_cancel_reason
                    )
                    self._transition(TaskWaitPhase.TERMINATED_FAILURE)
                    return self._replay_terminal()
                self._transition(TaskWaitPhase.WAITING)

            while not self._resolved():
                woke = await self.ctx.condition(self._resolved, self._next_wake())
                if woke or self._resolved():
                    break
                now = self.ctx.now()
                await self._run_due_steps(now)
                due_at = self.state.due_at
                if (
                    due_at is not None
                    and not self.state.breach_handled
                    and now >= due_at
                    and not self._resolved()
                ):
                    await self._handle_breach(now)
            return self._finish()
        finally:
            remove()
