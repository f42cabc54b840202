"""Pytest configuration and fixtures for taskgate.

Uses taskgate.main:app (with its lifespan) for HTTP tests, a ManualClock
driven WorkflowContext for wait protocol tests, and
taskgate.infrastructure.persistence.database for DB-dependent fixtures.
"""

import asyncio
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from taskgate.core.config import Settings
from taskgate.core.lifespan import create_lifespan
from taskgate.infrastructure.persistence import database
from taskgate.infrastructure.runtime import InProcessWorkflowRuntime, ManualClock, WorkflowContext
from taskgate.infrastructure.services import InMemoryTaskActivities, LogOnlyNotificationService
from taskgate.main import app


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI), lifespan included."""
    async with create_lifespan(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest.fixture
def settle():
    """Let background workflow tasks run on the real event loop."""

    async def run(rounds: int = 20) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return run


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of the environment's .env."""
    return Settings(_env_file=None)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def activities() -> AsyncMock:
    """Mocked ITaskActivities; create_task returns task-1, task-2, ..."""
    mock = AsyncMock()
    counter = iter(range(1, 1000))
    mock.create_task.side_effect = lambda task_input: f"task-{next(counter)}"
    return mock


@pytest.fixture
def ctx(clock: ManualClock, activities: AsyncMock, settings: Settings) -> WorkflowContext:
    """Workflow context over the manual clock and mocked activities."""
    return WorkflowContext("wf-1", "run-1", clock, activities, settings=settings)


@pytest.fixture
def notifier() -> LogOnlyNotificationService:
    return LogOnlyNotificationService()


@pytest.fixture
def task_store(notifier: LogOnlyNotificationService, settings: Settings) -> InMemoryTaskActivities:
    return InMemoryTaskActivities(notifier, settings=settings)


@pytest.fixture
async def runtime(
    task_store: InMemoryTaskActivities, clock: ManualClock, settings: Settings
) -> InProcessWorkflowRuntime:
    """Runtime over the in-memory task store, with no activity retries."""
    rt = InProcessWorkflowRuntime(
        task_store, clock=clock, settings=settings, retry_activities=False
    )
    task_store.attach_signal_sink(rt)
    yield rt
    await rt.shutdown()


@pytest.fixture
def completed_payload():
    """Builder for wire-format taskCompleted payloads."""

    def build(
        task_id: str,
        data: dict[str, Any] | None = None,
        completed_by: str = "alice",
        completed_at: datetime | None = None,
    ) -> dict[str, Any]:
        return {
            "taskId": task_id,
            "data": data or {},
            "completedBy": completed_by,
            "completedAt": (completed_at or datetime(2024, 1, 1, 10, 0)).isoformat() + "Z",
        }

    return build


@pytest.fixture
def cancelled_payload():
    """Builder for wire-format taskCancelled payloads."""

    def build(task_id: str, reason: str | None = None, cancelled_by: str | None = None) -> dict[str, Any]:
        return {"taskId": task_id, "reason": reason, "cancelledBy": cancelled_by}

    return build


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_BACKEND=postgres and DATABASE_URL. Skips when Postgres
    is not configured. Run without DB via: pytest -m 'not requires_db'.
    """
    from taskgate.infrastructure.persistence import models  # noqa: F401

    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip("Postgres not configured: set DATABASE_BACKEND=postgres and DATABASE_URL")
    async with database.engine.begin() as conn:
        await conn.run_sync(database.Base.metadata.create_all)
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
