"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready."""

    status: str = Field(default="ok", description="Readiness status")
    database_backend: str = Field(..., description="memory or postgres")
    round_robin_backend: str = Field(..., description="memory or redis (as wired at startup)")
    running_workflows: int = Field(default=0, description="Workflows currently running in this process")
