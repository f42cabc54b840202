"""API v1 router aggregation."""

from fastapi import APIRouter

from taskgate.api.v1.endpoints import assignments, health, tasks, workflows

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(workflows.router, prefix="/workflows", tags=["workflows"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(assignments.router, prefix="/assignments", tags=["assignments"])
