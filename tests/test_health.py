"""Health check endpoint tests."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_readiness_reports_backends(client: AsyncClient) -> None:
    """GET /api/v1/health/ready reports the wired backends."""
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database_backend"] == "memory"
    assert body["round_robin_backend"] == "memory"
    assert body["running_workflows"] == 0
