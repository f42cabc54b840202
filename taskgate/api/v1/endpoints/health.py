"""Health check endpoints, used for liveness and readiness probes."""

from fastapi import APIRouter, Request

from taskgate.core.config import get_settings
from taskgate.schemas.health import HealthResponse, ReadinessResponse
from taskgate.shared.enums import WorkflowRunStatus

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check(request: Request) -> ReadinessResponse:
    """Report the wired backends and how many workflows are running."""
    settings = get_settings()
    runtime = request.app.state.runtime
    running = sum(1 for h in runtime.list_handles() if h.status is WorkflowRunStatus.RUNNING)
    return ReadinessResponse(
        database_backend=settings.database_backend,
        round_robin_backend="redis" if request.app.state.round_robin_store is not None else "memory",
        running_workflows=running,
    )
