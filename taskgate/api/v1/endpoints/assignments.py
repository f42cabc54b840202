"""Assignment preview: resolve who a task would be routed to.

Note that resolving a round-robin group advances its cursor.
"""

from fastapi import APIRouter

from taskgate.api.v1.dependencies import ResolverDep
from taskgate.domain.value_objects.core import AssignmentTarget
from taskgate.schemas.assignment import ResolveAssignmentRequest, ResolvedAssignmentResponse

router = APIRouter()


@router.post("/resolve", response_model=ResolvedAssignmentResponse)
async def resolve_assignment(
    body: ResolveAssignmentRequest, resolver: ResolverDep
) -> ResolvedAssignmentResponse:
    """400 UNKNOWN_ASSIGNMENT_STRATEGY when the override names no registered strategy."""
    target = None
    if body.person or body.group:
        target = AssignmentTarget(person=body.person, group=body.group)
    resolved = await resolver.resolve(target, body.strategy)
    return ResolvedAssignmentResponse(
        person_id=resolved.person_id,
        group_id=resolved.group_id,
        strategy=str(getattr(resolved.strategy, "value", resolved.strategy)),
        unassigned=resolved.is_unassigned,
    )
