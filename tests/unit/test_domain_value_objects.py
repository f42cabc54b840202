"""Tests for domain value objects, entities and enums."""

from datetime import UTC, datetime, timedelta

import pytest

from taskgate.domain.entities.group import GroupEntity, GroupMemberEntity
from taskgate.domain.enums import BreachAction, EscalationAction, FormFieldType, TaskWaitPhase
from taskgate.domain.exceptions import InvalidDurationException, ValidationException
from taskgate.domain.value_objects.core import (
    AssignmentTarget,
    EscalationStep,
    FormField,
    FormSchema,
    SLAConfig,
)


def test_assignment_target_requires_person_or_group() -> None:
    with pytest.raises(ValidationException):
        AssignmentTarget()
    with pytest.raises(ValidationException):
        AssignmentTarget(person="", group=None)


def test_assignment_target_helpers() -> None:
    both = AssignmentTarget.to_person("alice", "support")
    assert both.to_dict() == {"person": "alice", "group": "support"}
    assert both.describe() == "support"
    assert AssignmentTarget.to_person("alice").describe() == "alice"
    assert AssignmentTarget.from_dict({"user": "bob"}) == AssignmentTarget(person="bob")
    assert AssignmentTarget.from_dict({"group": "ops"}) == AssignmentTarget.to_group("ops")


def test_escalation_step_coerces_action_and_validates_after() -> None:
    step = EscalationStep(after="15m", action="reassign", target=AssignmentTarget.to_person("bob"))
    assert step.action is EscalationAction.REASSIGN
    assert step.after_ms == 900_000
    with pytest.raises(InvalidDurationException):
        EscalationStep(after="later", action="notify")
    with pytest.raises(ValueError):
        EscalationStep(after="1m", action="shout")


def test_sla_config_defaults_and_validation() -> None:
    config = SLAConfig(deadline="30m")
    assert config.on_breach is BreachAction.ESCALATE
    assert config.escalation_chain == ()
    assert config.warn_before_ms is None
    assert SLAConfig(deadline="1h", on_breach="cancel").on_breach is BreachAction.CANCEL
    with pytest.raises(InvalidDurationException):
        SLAConfig(deadline="whenever")
    with pytest.raises(ValidationException):
        SLAConfig(deadline=datetime(2024, 1, 1))


def test_sla_config_with_defaults() -> None:
    managers = AssignmentTarget.to_group("managers")
    config = SLAConfig(deadline="1h", warn_before="5m")
    filled = config.with_defaults(managers)
    assert filled.escalate_to == managers
    assert filled.warn_before_ms == 300_000
    explicit = SLAConfig(deadline="1h", escalate_to=AssignmentTarget.to_group("ops"))
    assert explicit.with_defaults(managers) is explicit


def test_form_schema_required_fields() -> None:
    form = FormSchema(fields={
        "a": FormField(type="text", required=True),
        "b": FormField(type=FormFieldType.NUMBER),
    })
    assert form.required_fields == ["a"]
    assert form.fields["b"].type is FormFieldType.NUMBER


def test_group_eligible_members_in_join_order() -> None:
    t0 = datetime(2024, 1, 1, tzinfo=UTC)
    group = GroupEntity(
        id="g",
        name="G",
        members=[
            GroupMemberEntity("c", t0 + timedelta(days=2)),
            GroupMemberEntity("a", t0),
            GroupMemberEntity("b", t0 + timedelta(days=1), user_active=False),
        ],
    )
    assert group.member_count == 3
    assert group.eligible_member_ids() == ["a", "c"]
    group.is_assignable = False
    assert group.eligible_member_ids() == []


def test_task_wait_phase_terminal() -> None:
    assert TaskWaitPhase.COMPLETED.is_terminal
    assert TaskWaitPhase.TERMINATED_FAILURE.is_terminal
    assert not TaskWaitPhase.BREACH_HANDLED.is_terminal
    assert "waiting" in TaskWaitPhase.values()
