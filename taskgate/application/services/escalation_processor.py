"""Escalation processor: chain ordering, step selection and audit reasons.

Chain helpers are pure; offsets are measured from task creation. Chains
are sorted by offset (stable) before any lookup, so callers may pass
steps in any order. Step indexes returned here refer to the sorted chain.

EscalationProcessor applies the same rules to stored tasks (e.g. for a
periodic sweep outside any workflow).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from taskgate.application.dtos.escalation import EscalationCandidate, EscalationResult
from taskgate.application.services.sla_calculator import is_breached
from taskgate.core.constants import ACTIVE_TASK_STATUSES
from taskgate.domain.enums import BreachAction, EscalationAction
from taskgate.domain.exceptions import InvalidDurationException, ValidationException
from taskgate.domain.value_objects.core import AssignmentTarget, EscalationStep, SLAConfig
from taskgate.shared.telemetry.logging import get_logger
from taskgate.shared.utils.datetime import add_ms, diff_ms

logger = get_logger(__name__)


def sort_chain(chain: Iterable[EscalationStep]) -> list[EscalationStep]:
    """Return the chain sorted ascending by offset (ties keep their order)."""
    return sorted(chain, key=lambda step: step.after_ms)


def applicable_step(
    chain: Sequence[EscalationStep], elapsed_ms: int
) -> EscalationStep | None:
    """Return the last step whose offset is <= elapsed, or None if none is due."""
    found = None
    for step in sort_chain(chain):
        if step.after_ms <= elapsed_ms:
            found = step
        else:
            break
    return found


def next_step(chain: Sequence[EscalationStep], elapsed_ms: int) -> EscalationStep | None:
    """Return the first step still in the future, or None."""
    for step in sort_chain(chain):
        if step.after_ms > elapsed_ms:
            return step
    return None


def due_steps(
    chain: Sequence[EscalationStep], elapsed_ms: int, executed: Iterable[int] = ()
) -> list[tuple[int, EscalationStep]]:
    """Return (index, step) pairs that are due and not yet executed, in order."""
    done = set(executed)
    return [
        (i, step)
        for i, step in enumerate(sort_chain(chain))
        if step.after_ms <= elapsed_ms and i not in done
    ]


def next_pending_offset(
    chain: Sequence[EscalationStep], executed: Iterable[int] = ()
) -> int | None:
    """Smallest offset among steps not yet executed, or None when all have fired."""
    done = set(executed)
    offsets = [s.after_ms for i, s in enumerate(sort_chain(chain)) if i not in done]
    return min(offsets) if offsets else None


def next_escalation_time(
    chain: Sequence[EscalationStep], created_at: datetime, current_step_index: int = -1
) -> datetime | None:
    """Instant of the step after current_step_index, or None when the chain is exhausted."""
    ordered = sort_chain(chain)
    nxt = current_step_index + 1
    if nxt >= len(ordered):
        return None
    return add_ms(created_at, ordered[nxt].after_ms)


def step_target(
    step: EscalationStep | None, default_target: AssignmentTarget | None = None
) -> AssignmentTarget | None:
    """The step's explicit target, else the default (which may be None)."""
    if step is not None and step.target is not None:
        return step.target
    return default_target


def should_escalate_on_breach(config: SLAConfig | None) -> bool:
    """True only for on_breach == escalate; notify and cancel never consult the chain."""
    return config is not None and config.on_breach is BreachAction.ESCALATE


def escalation_reason(
    step: EscalationStep | None,
    elapsed_description: str,
    target: AssignmentTarget | None = None,
) -> str:
    """Audit string such as "SLA breached after 45m, escalating to support-l2"."""
    resolved = step_target(step, target)
    action = step.action if step is not None else EscalationAction.ESCALATE
    label = resolved.describe() if resolved is not None else ""
    if action is EscalationAction.NOTIFY:
        tail = "sending urgent notification"
    elif action is EscalationAction.REASSIGN:
        tail = f"reassigning to {label}" if label else "reassigning"
    else:
        tail = f"escalating to {label}" if label else "escalating"
    reason = f"SLA breached after {elapsed_description}, {tail}"
    if step is not None and step.message:
        reason = f"{reason}: {step.message}"
    return reason


def processing_reason(
    breached: bool, step: EscalationStep | None = None, automatic: bool = True
) -> str:
    """Reason recorded by EscalationProcessor ("Automatic escalation due to SLA breach - ...")."""
    parts = ["Automatic escalation" if automatic else "Manual escalation"]
    if breached:
        parts.append("due to SLA breach")
    if step is not None and step.message:
        parts.append(f"- {step.message}")
    return " ".join(parts)


def _parse_step(raw: Any) -> EscalationStep | None:
    if not isinstance(raw, dict):
        return None
    after = raw.get("after")
    if after is None or isinstance(after, bool):
        return None
    target_data = raw.get("target")
    if isinstance(target_data, dict):
        person, group = target_data.get("person") or target_data.get("user"), target_data.get("group")
    else:
        person, group = raw.get("toUserId"), raw.get("toGroupId")
    try:
        target = AssignmentTarget(person=person, group=group) if (person or group) else None
        return EscalationStep(
            after=after,
            action=raw.get("action", EscalationAction.ESCALATE.value),
            target=target,
            message=raw.get("message"),
        )
    except (InvalidDurationException, ValidationException, ValueError):
        return None


def parse_escalation_config(raw: Any) -> tuple[EscalationStep, ...] | None:
    """Parse a stored escalation chain (JSON list of steps).

    Accepts {"after", "action", "target": {...}, "message"} steps and the
    legacy {"after", "toUserId", "toGroupId"} shape (action escalate).
    Returns None when raw is empty or any step is malformed.
    """
    if not raw or not isinstance(raw, list):
        return None
    steps = []
    for item in raw:
        step = _parse_step(item)
        if step is None:
            logger.warning("Ignoring malformed escalation config: bad step %r", item)
            return None
        steps.append(step)
    return tuple(steps)


class EscalationProcessor:
    """Decides escalations for stored tasks (auto sweep and manual requests)."""

    def __init__(self, default_target: AssignmentTarget | None = None) -> None:
        """Initialize.

        Args:
            default_target: Used when neither the chain nor the task names a target.
        """
        self.default_target = default_target

    def _fallback_target(self, task: EscalationCandidate) -> AssignmentTarget | None:
        if task.assigned_person or task.assigned_group:
            return AssignmentTarget(person=task.assigned_person, group=task.assigned_group)
        return self.default_target

    @staticmethod
    def _is_breached(task: EscalationCandidate, now: datetime) -> bool:
        if task.due_at is None or task.status not in ACTIVE_TASK_STATUSES:
            return False
        return is_breached(task.due_at, now)

    def process_auto_escalation(
        self, task: EscalationCandidate, now: datetime, executed_steps: int = 0
    ) -> EscalationResult:
        """Return the escalation due for task at now.

        Without a chain, a breached open task escalates to its current
        assignee (final step). With a chain, the latest due step at or
        after executed_steps is chosen.
        """
        chain = sort_chain(task.escalation_chain)
        breached = self._is_breached(task, now)
        if not chain:
            if breached:
                return EscalationResult(
                    escalated=True,
                    is_final_step=True,
                    escalated_to=self._fallback_target(task),
                    reason=processing_reason(True),
                )
            return EscalationResult(escalated=False, is_final_step=True)

        elapsed = diff_ms(now, task.created_at)
        for index in range(len(chain) - 1, executed_steps - 1, -1):
            step = chain[index]
            if elapsed >= step.after_ms:
                logger.info(
                    "Auto escalation for task %s: step %d (%s)",
                    task.task_id, index, step.action.value,
                )
                return EscalationResult(
                    escalated=True,
                    is_final_step=index >= len(chain) - 1,
                    escalated_to=step_target(step, self._fallback_target(task)),
                    reason=processing_reason(breached, step),
                    step_index=index,
                )
        return EscalationResult(
            escalated=False, is_final_step=executed_steps >= len(chain)
        )

    def process_manual_escalation(
        self,
        task: EscalationCandidate,
        now: datetime,
        target: AssignmentTarget | None = None,
        reason: str | None = None,
    ) -> EscalationResult:
        """Escalate on request: explicit target, else the chain's first step target, else current assignee."""
        resolved = target
        if resolved is None and task.escalation_chain:
            resolved = sort_chain(task.escalation_chain)[0].target
        if resolved is None:
            resolved = self._fallback_target(task)
        return EscalationResult(
            escalated=True,
            is_final_step=True,
            escalated_to=resolved,
            reason=reason or processing_reason(self._is_breached(task, now), automatic=False),
        )

    def select_needing_escalation(
        self, tasks: Iterable[EscalationCandidate], now: datetime
    ) -> list[EscalationCandidate]:
        """Open tasks past due that carry a chain, earliest due first."""
        due = [
            t for t in tasks
            if t.escalation_chain and self._is_breached(t, now)
        ]
        return sorted(due, key=lambda t: t.due_at)
