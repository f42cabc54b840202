"""Application services: SLA timing, escalation, assignment and forms."""

from taskgate.application.services.assignment_resolver import (
    AssignmentResolver,
    DirectStrategy,
    InMemoryRoundRobinCursorStore,
    LoadBalancedStrategy,
    RoundRobinStrategy,
)
from taskgate.application.services.escalation_processor import EscalationProcessor

__all__ = [
    "AssignmentResolver",
    "DirectStrategy",
    "EscalationProcessor",
    "InMemoryRoundRobinCursorStore",
    "LoadBalancedStrategy",
    "RoundRobinStrategy",
]
