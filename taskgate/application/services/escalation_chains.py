"""Escalation chain builder and common presets.

    chain = (
        EscalationChainBuilder()
        .notify_after("15m", "Still waiting on you")
        .escalate_after("1h", AssignmentTarget.to_group("managers"))
        .build()
    )
"""

from __future__ import annotations

from collections.abc import Sequence

from taskgate.domain.enums import EscalationAction
from taskgate.domain.value_objects.core import AssignmentTarget, EscalationStep
from taskgate.shared.utils.duration import Duration, parse_duration

DEFAULT_ATTENTION_MESSAGE = "Task requires attention"


class EscalationChainBuilder:
    """Fluent builder for escalation chains."""

    def __init__(self) -> None:
        self._steps: list[EscalationStep] = []

    def notify_after(self, after: Duration, message: str | None = None) -> EscalationChainBuilder:
        self._steps.append(EscalationStep(after=after, action=EscalationAction.NOTIFY, message=message))
        return self

    def reassign_after(self, after: Duration, target: AssignmentTarget) -> EscalationChainBuilder:
        self._steps.append(EscalationStep(after=after, action=EscalationAction.REASSIGN, target=target))
        return self

    def escalate_after(
        self,
        after: Duration,
        target: AssignmentTarget | None = None,
        message: str | None = None,
    ) -> EscalationChainBuilder:
        self._steps.append(
            EscalationStep(after=after, action=EscalationAction.ESCALATE, target=target, message=message)
        )
        return self

    def build(self) -> tuple[EscalationStep, ...]:
        """Return the steps added so far (the builder stays usable)."""
        return tuple(self._steps)


def tiered_support(
    tiers: Sequence[str],
    escalation_interval: Duration,
    notify_first: bool = False,
    notify_after: Duration | None = None,
) -> tuple[EscalationStep, ...]:
    """Escalate through support tiers (groups), one tier per interval.

    The first tier is the original assignee, so escalation starts at
    tiers[1] after one interval. With notify_first and notify_after an
    attention notification precedes the first escalation.
    """
    interval_ms = parse_duration(escalation_interval)
    builder = EscalationChainBuilder()
    if notify_first and notify_after is not None:
        builder.notify_after(notify_after, DEFAULT_ATTENTION_MESSAGE)
    for i, tier in enumerate(tiers[1:], start=1):
        builder.escalate_after(interval_ms * i, AssignmentTarget.to_group(tier))
    return builder.build()


def approval_escalation(
    initial_timeout: Duration, fallback_approver: AssignmentTarget
) -> tuple[EscalationStep, ...]:
    """Remind the approver at half the timeout, then escalate to the fallback approver."""
    initial_ms = parse_duration(initial_timeout)
    return (
        EscalationChainBuilder()
        .notify_after(initial_ms // 2, "Approval request awaiting your response")
        .escalate_after(
            initial_timeout,
            fallback_approver,
            "Escalated due to no response from initial approver",
        )
        .build()
    )


def simple_escalation(timeout: Duration, escalate_to: AssignmentTarget) -> tuple[EscalationStep, ...]:
    """A single escalate step."""
    return EscalationChainBuilder().escalate_after(timeout, escalate_to).build()


def notify_then_escalate(
    notify_after: Duration,
    escalate_after: Duration,
    escalate_to: AssignmentTarget,
    notify_message: str | None = None,
) -> tuple[EscalationStep, ...]:
    """A notify step followed by an escalate step."""
    return (
        EscalationChainBuilder()
        .notify_after(notify_after, notify_message or DEFAULT_ATTENTION_MESSAGE)
        .escalate_after(escalate_after, escalate_to)
        .build()
    )
