"""Tests for SLA calculation and SLA policy builders."""

from datetime import UTC, datetime, timedelta

import pytest

from taskgate.application.services.sla_calculator import (
    compute_deadline,
    compute_sla,
    describe_sla,
    is_breached,
    is_in_warning_period,
    sla_status,
    time_remaining,
    warning_time,
)
from taskgate.application.services.sla_policies import (
    deadline,
    deadline_with_escalation,
    tier_based_escalation,
    tier_based_timeout,
    timeout,
    timeout_with_escalation,
    timeout_with_warning,
)
from taskgate.domain.enums import BreachAction, SLAState
from taskgate.domain.exceptions import ValidationException
from taskgate.domain.value_objects.core import AssignmentTarget, EscalationStep, SLAConfig

T0 = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)


def test_compute_deadline_from_duration() -> None:
    """30m after 10:00:00Z is 10:30:00Z."""
    assert compute_deadline(T0, "30m") == datetime(2024, 1, 1, 10, 30, tzinfo=UTC)


def test_compute_deadline_absolute_unchanged() -> None:
    when = datetime(2024, 1, 2, 0, 0, tzinfo=UTC)
    assert compute_deadline(T0, when) == when


def test_is_breached_at_deadline() -> None:
    due = T0 + timedelta(minutes=30)
    assert is_breached(due, due) is True
    assert is_breached(due, due - timedelta(milliseconds=1)) is False


def test_time_remaining_is_signed() -> None:
    due = T0 + timedelta(minutes=30)
    assert time_remaining(due, T0) == 1_800_000
    assert time_remaining(due, due + timedelta(minutes=5)) == -300_000


def test_warning_period() -> None:
    """Warning window is [deadline - warn, deadline)."""
    due = T0 + timedelta(hours=1)
    assert warning_time(due, "10m") == T0 + timedelta(minutes=50)
    assert is_in_warning_period(due, "10m", T0 + timedelta(minutes=49)) is False
    assert is_in_warning_period(due, "10m", T0 + timedelta(minutes=50)) is True
    assert is_in_warning_period(due, "10m", due) is False
    assert is_in_warning_period(due, None, T0 + timedelta(minutes=55)) is False


def test_sla_status() -> None:
    due = T0 + timedelta(hours=1)
    assert sla_status(due, "10m", T0) is SLAState.ON_TRACK
    assert sla_status(due, "10m", T0 + timedelta(minutes=55)) is SLAState.WARNING
    assert sla_status(due, "10m", due) is SLAState.BREACHED


def test_compute_sla() -> None:
    step = EscalationStep(after="15m", action="notify")
    config = SLAConfig(deadline="1h", on_breach="notify", warn_before="10m", escalation_chain=[step])
    computed = compute_sla(config, T0)
    assert computed.due_at == T0 + timedelta(hours=1)
    assert computed.warn_at == T0 + timedelta(minutes=50)
    assert computed.escalation_chain == (step,)
    assert computed.on_breach is BreachAction.NOTIFY


def test_describe_sla() -> None:
    due = T0 + timedelta(minutes=90)
    info = describe_sla(due, None, T0)
    assert info.state is SLAState.ON_TRACK
    assert info.breached is False
    assert info.warning is False
    assert info.time_remaining_ms == 5_400_000
    assert info.time_remaining_formatted == "1h 30m"
    assert info.deadline == due


def test_timeout_policies() -> None:
    target = AssignmentTarget.to_group("support-l2")
    assert timeout("30m").on_breach is BreachAction.ESCALATE
    assert timeout("30m", "cancel").on_breach is BreachAction.CANCEL
    escalating = timeout_with_escalation("1h", target)
    assert escalating.escalate_to == target
    warned = timeout_with_warning("1h", "10m", BreachAction.NOTIFY)
    assert warned.warn_before_ms == 600_000
    assert warned.on_breach is BreachAction.NOTIFY


def test_deadline_policy_measures_from_now() -> None:
    config = deadline(T0 + timedelta(hours=2), now=T0)
    assert config.deadline == 7_200_000
    assert config.on_breach is BreachAction.NOTIFY
    target = AssignmentTarget.to_person("boss")
    assert deadline_with_escalation(T0 + timedelta(hours=1), target, now=T0).escalate_to == target


def test_deadline_policy_rejects_past_instant() -> None:
    with pytest.raises(ValidationException):
        deadline(T0, now=T0)


def test_tier_based_timeout_falls_back_to_default_tier() -> None:
    for_tier = tier_based_timeout({"gold": "1h", "basic": "1d"}, "basic")
    assert for_tier("gold").deadline == "1h"
    assert for_tier("unknown").deadline == "1d"


def test_tier_based_timeout_without_default_raises() -> None:
    for_tier = tier_based_timeout({"gold": "1h"}, "basic")
    with pytest.raises(ValidationException):
        for_tier("silver")


def test_tier_based_escalation() -> None:
    managers = AssignmentTarget.to_group("managers")
    for_tier = tier_based_escalation({"gold": {"timeout": "30m", "escalate_to": managers}}, "gold")
    config = for_tier("bronze")
    assert config.deadline == "30m"
    assert config.escalate_to == managers
