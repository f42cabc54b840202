"""In-process workflow runtime: clocks, workflow context and runtime."""

from taskgate.infrastructure.runtime.clock import ManualClock, SystemClock, WorkflowClock
from taskgate.infrastructure.runtime.context import WorkflowContext
from taskgate.infrastructure.runtime.runtime import InProcessWorkflowRuntime, WorkflowHandle

__all__ = [
    "InProcessWorkflowRuntime",
    "ManualClock",
    "SystemClock",
    "WorkflowClock",
    "WorkflowContext",
    "WorkflowHandle",
]
