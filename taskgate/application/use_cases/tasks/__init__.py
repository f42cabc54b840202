"""Human task use cases: single-task wait, combinators, task helpers."""

from taskgate.application.use_cases.tasks.combinators import all_tasks, any_task
from taskgate.application.use_cases.tasks.human_task import (
    cancel_task,
    notify_urgent,
    reassign_task,
    run_task,
    task_with_escalation,
)
from taskgate.application.use_cases.tasks.wait_protocol import TaskWaitProtocol

__all__ = [
    "TaskWaitProtocol",
    "all_tasks",
    "any_task",
    "cancel_task",
    "notify_urgent",
    "reassign_task",
    "run_task",
    "task_with_escalation",
]
