"""Application DTOs (dataclasses and signal models; no ORM)."""

from taskgate.application.dtos.escalation import EscalationCandidate, EscalationResult
from taskgate.application.dtos.signals import TaskCancelledSignal, TaskCompletedSignal
from taskgate.application.dtos.sla import ComputedSLA, SLAStatusInfo
from taskgate.application.dtos.task import (
    CreateTaskInput,
    ResolvedAssignment,
    TaskOptions,
    TaskResult,
)
from taskgate.application.dtos.task_wait import TaskWaitState

__all__ = [
    "ComputedSLA",
    "EscalationCandidate",
    "EscalationResult",
    "CreateTaskInput",
    "ResolvedAssignment",
    "SLAStatusInfo",
    "TaskCancelledSignal",
    "TaskCompletedSignal",
    "TaskOptions",
    "TaskResult",
    "TaskWaitState",
]
