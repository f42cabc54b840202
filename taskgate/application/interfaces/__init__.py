"""Application ports (Protocols) implemented by infrastructure."""

from taskgate.application.interfaces.repositories import (
    IGroupRepository,
    IRoundRobinCursorStore,
)
from taskgate.application.interfaces.services import (
    IAssignmentStrategy,
    INotificationService,
    ISignalSink,
    ITaskActivities,
    IWorkflowContext,
    SignalHandler,
)

__all__ = [
    "IAssignmentStrategy",
    "IGroupRepository",
    "INotificationService",
    "IRoundRobinCursorStore",
    "ISignalSink",
    "ITaskActivities",
    "IWorkflowContext",
    "SignalHandler",
]
