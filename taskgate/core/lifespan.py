"""Application lifespan: startup and shutdown.

Wires the reference adapters: notification sender, in-memory task
provider, group directory (memory or SQL), round-robin cursor store
(memory or Redis), assignment resolver and the in-process workflow
runtime. No business logic here.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from taskgate.application.services.assignment_resolver import (
    AssignmentResolver,
    InMemoryRoundRobinCursorStore,
)
from taskgate.core.config import get_settings
from taskgate.infrastructure.runtime import InProcessWorkflowRuntime
from taskgate.infrastructure.services import InMemoryTaskActivities, LogOnlyNotificationService
from taskgate.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, task provider, group directory, cursor store,
    resolver, runtime. Shutdown order: runtime, Redis, SQL engine.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    notifier = LogOnlyNotificationService()
    activities = InMemoryTaskActivities(notifier, settings=settings)

    if settings.database_backend == "postgres":
        from taskgate.infrastructure.persistence.database import get_session_factory
        from taskgate.infrastructure.persistence.repositories.group_repo import GroupRepository

        group_repo = GroupRepository(get_session_factory())
    else:
        from taskgate.infrastructure.persistence.repositories.memory_group_repo import (
            InMemoryGroupRepository,
        )

        group_repo = InMemoryGroupRepository(task_counter=activities.count_active_by_user)

    cursor_store = None
    app.state.round_robin_store = None
    if settings.round_robin_backend == "redis":
        from taskgate.infrastructure.cache.round_robin_store import RedisRoundRobinCursorStore

        redis_store = RedisRoundRobinCursorStore(settings=settings)
        if await redis_store.connect():
            cursor_store = redis_store
            app.state.round_robin_store = redis_store
        else:
            logger.warning("Round-robin cursors fall back to process memory")
    if cursor_store is None:
        cursor_store = InMemoryRoundRobinCursorStore()

    resolver = AssignmentResolver(group_repo, cursor_store=cursor_store)
    runtime = InProcessWorkflowRuntime(activities, resolver=resolver, settings=settings)
    activities.attach_signal_sink(runtime)

    app.state.notifier = notifier
    app.state.activities = activities
    app.state.group_repo = group_repo
    app.state.resolver = resolver
    app.state.runtime = runtime
    logger.info(
        "%s started (database=%s, round_robin=%s)",
        settings.app_name,
        settings.database_backend,
        "redis" if app.state.round_robin_store is not None else "memory",
    )

    yield

    # ---- Shutdown ----
    await runtime.shutdown()

    if app.state.round_robin_store is not None:
        await app.state.round_robin_store.disconnect()

    from taskgate.infrastructure.persistence import database

    await database.dispose_engine()
