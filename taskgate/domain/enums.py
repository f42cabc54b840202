"""Domain enumerations for human-task orchestration."""

from enum import Enum

from taskgate.shared.enums import _ValuesMixin


class TaskPriority(_ValuesMixin, str, Enum):
    """Task priority passed to the task provider."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class BreachAction(_ValuesMixin, str, Enum):
    """What happens when a task's SLA deadline passes."""

    ESCALATE = "escalate"
    NOTIFY = "notify"
    CANCEL = "cancel"


class EscalationAction(_ValuesMixin, str, Enum):
    """Action performed by one escalation chain step."""

    NOTIFY = "notify"
    ESCALATE = "escalate"
    REASSIGN = "reassign"


class AssignmentStrategyType(_ValuesMixin, str, Enum):
    """Built-in assignment strategies."""

    ROUND_ROBIN = "round_robin"
    LOAD_BALANCED = "load_balanced"
    DIRECT = "direct"

    @classmethod
    def from_group_tag(cls, tag: str | None) -> "AssignmentStrategyType":
        """Map a group's stored strategy tag to a strategy.

        Legacy tags: least_loaded -> load_balanced, manual -> direct.
        Missing, unknown and unsupported tags (e.g. random) fall back
        to round_robin.
        """
        normalized = (tag or "").strip().lower()
        if normalized in ("load_balanced", "least_loaded"):
            return cls.LOAD_BALANCED
        if normalized in ("direct", "manual"):
            return cls.DIRECT
        return cls.ROUND_ROBIN


class SLAState(_ValuesMixin, str, Enum):
    """Point-in-time SLA status of a task."""

    ON_TRACK = "on_track"
    WARNING = "warning"
    BREACHED = "breached"


class TaskWaitPhase(_ValuesMixin, str, Enum):
    """Phases of the task wait state machine."""

    CREATED = "created"
    WAITING = "waiting"
    BREACH_HANDLED = "breach_handled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    TERMINATED_FAILURE = "terminated_failure"

    @property
    def is_terminal(self) -> bool:
        """True for phases the wait never leaves."""
        return self in (
            TaskWaitPhase.COMPLETED,
            TaskWaitPhase.CANCELLED,
            TaskWaitPhase.TERMINATED_FAILURE,
        )


class FormFieldType(_ValuesMixin, str, Enum):
    """Supported task form field types."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"
    DATE = "date"
