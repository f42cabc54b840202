"""Domain value objects for human-task orchestration.

Value objects are immutable types with self-validation: assignment
targets, escalation steps, SLA configs and form field definitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from taskgate.domain.enums import BreachAction, EscalationAction, FormFieldType
from taskgate.domain.exceptions import ValidationException
from taskgate.shared.utils.duration import Duration, parse_duration


@dataclass(frozen=True)
class AssignmentTarget:
    """Who a task is aimed at: a person, a group, or a person within a group.

    A target with neither is rejected; the resolver's "unassigned" result
    is a ResolvedAssignment, never an AssignmentTarget.
    """

    person: str | None = None
    group: str | None = None

    def __post_init__(self) -> None:
        if not self.person and not self.group:
            raise ValidationException(
                "Assignment target needs a person, a group, or both", "assign_to"
            )

    @classmethod
    def to_person(cls, person_id: str, group_id: str | None = None) -> AssignmentTarget:
        return cls(person=person_id, group=group_id)

    @classmethod
    def to_group(cls, group_id: str) -> AssignmentTarget:
        return cls(group=group_id)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssignmentTarget:
        """Build from a stored/wire mapping ({"user"|"person": ..., "group": ...})."""
        return cls(
            person=data.get("person") or data.get("user"),
            group=data.get("group"),
        )

    def to_dict(self) -> dict[str, str]:
        out: dict[str, str] = {}
        if self.person:
            out["person"] = self.person
        if self.group:
            out["group"] = self.group
        return out

    def describe(self) -> str:
        """Short label for logs and escalation reasons (group wins over person)."""
        return self.group or self.person or ""


@dataclass(frozen=True)
class EscalationStep:
    """One step of an escalation chain: do `action` once `after` has elapsed since creation."""

    after: Duration
    action: EscalationAction
    target: AssignmentTarget | None = None
    message: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "action", EscalationAction(self.action))
        parse_duration(self.after)

    @property
    def after_ms(self) -> int:
        return parse_duration(self.after)


@dataclass(frozen=True)
class SLAConfig:
    """Service-level agreement attached to a task.

    deadline is a duration measured from task creation or an absolute
    instant. on_breach defaults to escalate.
    """

    deadline: Duration | datetime
    on_breach: BreachAction = BreachAction.ESCALATE
    escalate_to: AssignmentTarget | None = None
    warn_before: Duration | None = None
    escalation_chain: tuple[EscalationStep, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "on_breach", BreachAction(self.on_breach))
        object.__setattr__(self, "escalation_chain", tuple(self.escalation_chain))
        if isinstance(self.deadline, datetime):
            if self.deadline.tzinfo is None:
                raise ValidationException("Absolute SLA deadline must be timezone-aware", "deadline")
        else:
            parse_duration(self.deadline)
        if self.warn_before is not None:
            parse_duration(self.warn_before)

    @property
    def warn_before_ms(self) -> int | None:
        if self.warn_before is None:
            return None
        return parse_duration(self.warn_before)

    def with_defaults(self, escalate_to: AssignmentTarget | None) -> SLAConfig:
        """Return a copy with escalate_to filled when it is unset."""
        if self.escalate_to is not None or escalate_to is None:
            return self
        return SLAConfig(
            deadline=self.deadline,
            on_breach=self.on_breach,
            escalate_to=escalate_to,
            warn_before=self.warn_before,
            escalation_chain=self.escalation_chain,
        )


@dataclass(frozen=True)
class SelectOption:
    """One choice of a select field."""

    value: str
    label: str


@dataclass(frozen=True)
class FormField:
    """Definition of one task form field."""

    type: FormFieldType
    label: str | None = None
    required: bool = False
    default: Any = None
    options: tuple[SelectOption, ...] = ()
    min: float | None = None
    max: float | None = None
    pattern: str | None = None
    message: str | None = None
    help_text: str | None = None
    placeholder: str | None = None
    disabled: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", FormFieldType(self.type))
        object.__setattr__(self, "options", tuple(self.options))


@dataclass(frozen=True)
class FormSchema:
    """Ordered set of named fields a human fills in to complete a task."""

    fields: dict[str, FormField] = field(default_factory=dict)

    @property
    def required_fields(self) -> list[str]:
        return [name for name, f in self.fields.items() if f.required]
