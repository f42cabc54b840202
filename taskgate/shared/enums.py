"""Shared enumerations for taskgate.

Cross-cutting enums used by application and infrastructure (e.g. the
persisted task status). Orchestration enums live in taskgate.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TaskStatus(_ValuesMixin, str, Enum):
    """Task record status as stored by the task provider."""

    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class WorkflowRunStatus(_ValuesMixin, str, Enum):
    """Lifecycle status of a workflow run in the in-process runtime."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
