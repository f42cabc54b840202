"""Builders for common SLA configurations.

    timeout("30m")                                  # escalate after 30 minutes
    timeout_with_escalation("1h", AssignmentTarget.to_group("support-l2"))
    deadline(end_of_day, now=ctx.now())             # notify at a fixed instant
    tier_based_timeout({"gold": "1h", "basic": "1d"}, "basic")("gold")
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from taskgate.domain.enums import BreachAction
from taskgate.domain.exceptions import ValidationException
from taskgate.domain.value_objects.core import AssignmentTarget, SLAConfig
from taskgate.shared.utils.datetime import diff_ms
from taskgate.shared.utils.duration import Duration


def timeout(duration: Duration, on_breach: BreachAction | str = BreachAction.ESCALATE) -> SLAConfig:
    """SLA with a relative deadline."""
    return SLAConfig(deadline=duration, on_breach=BreachAction(on_breach))


def timeout_with_escalation(duration: Duration, escalate_to: AssignmentTarget) -> SLAConfig:
    """Relative deadline that escalates to a specific target on breach."""
    return SLAConfig(
        deadline=duration, on_breach=BreachAction.ESCALATE, escalate_to=escalate_to
    )


def timeout_with_warning(
    duration: Duration,
    warn_before: Duration,
    on_breach: BreachAction | str = BreachAction.ESCALATE,
) -> SLAConfig:
    """Relative deadline with a warning window before it."""
    return SLAConfig(
        deadline=duration, on_breach=BreachAction(on_breach), warn_before=warn_before
    )


def _ms_until(when: datetime, now: datetime) -> int:
    ms = diff_ms(when, now)
    if ms <= 0:
        raise ValidationException("Deadline must be in the future", "deadline")
    return ms


def deadline(
    when: datetime,
    on_breach: BreachAction | str = BreachAction.NOTIFY,
    *,
    now: datetime,
) -> SLAConfig:
    """SLA for a fixed instant, expressed as the time left from now.

    Raises:
        ValidationException: when is not after now.
    """
    return SLAConfig(deadline=_ms_until(when, now), on_breach=BreachAction(on_breach))


def deadline_with_escalation(
    when: datetime, escalate_to: AssignmentTarget, *, now: datetime
) -> SLAConfig:
    """Fixed-instant SLA that escalates to a specific target on breach."""
    return SLAConfig(
        deadline=_ms_until(when, now),
        on_breach=BreachAction.ESCALATE,
        escalate_to=escalate_to,
    )


def tier_based_timeout(
    config: Mapping[str, Duration], default_tier: str
) -> Callable[[str], SLAConfig]:
    """Return a lookup producing a timeout() SLA per customer tier.

    Unknown tiers use default_tier; a missing default raises on lookup.
    """

    def for_tier(tier: str) -> SLAConfig:
        duration = config.get(tier, config.get(default_tier))
        if duration is None:
            raise ValidationException(f"No SLA configured for tier: {tier}", "tier")
        return timeout(duration)

    return for_tier


def tier_based_escalation(
    config: Mapping[str, Mapping[str, Any]], default_tier: str
) -> Callable[[str], SLAConfig]:
    """Like tier_based_timeout, with a per-tier escalation target.

    Each tier maps to {"timeout": Duration, "escalate_to": AssignmentTarget}.
    """

    def for_tier(tier: str) -> SLAConfig:
        tier_config = config.get(tier, config.get(default_tier))
        if tier_config is None:
            raise ValidationException(f"No SLA configured for tier: {tier}", "tier")
        return timeout_with_escalation(tier_config["timeout"], tier_config["escalate_to"])

    return for_tier
