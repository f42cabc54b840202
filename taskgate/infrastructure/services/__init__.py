"""Infrastructure services: task activity providers and notifications."""

from taskgate.infrastructure.services.in_memory_activities import (
    InMemoryTaskActivities,
    TaskRecord,
)
from taskgate.infrastructure.services.notification_service import LogOnlyNotificationService
from taskgate.infrastructure.services.retrying_activities import RetryingTaskActivities

__all__ = [
    "InMemoryTaskActivities",
    "LogOnlyNotificationService",
    "RetryingTaskActivities",
    "TaskRecord",
]
