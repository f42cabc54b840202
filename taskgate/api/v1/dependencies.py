"""Presentation-layer dependency injection.

Routes read the objects wired by the lifespan from app.state through
these dependencies, never from infrastructure modules directly.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from taskgate.application.services.assignment_resolver import AssignmentResolver
from taskgate.infrastructure.runtime import InProcessWorkflowRuntime
from taskgate.infrastructure.services import InMemoryTaskActivities


def get_runtime(request: Request) -> InProcessWorkflowRuntime:
    return request.app.state.runtime


def get_activities(request: Request) -> InMemoryTaskActivities:
    return request.app.state.activities


def get_resolver(request: Request) -> AssignmentResolver:
    return request.app.state.resolver


RuntimeDep = Annotated[InProcessWorkflowRuntime, Depends(get_runtime)]
ActivitiesDep = Annotated[InMemoryTaskActivities, Depends(get_activities)]
ResolverDep = Annotated[AssignmentResolver, Depends(get_resolver)]
