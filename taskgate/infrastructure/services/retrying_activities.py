"""Retry policy around task activities (implements ITaskActivities).

Every activity call is retried with exponential backoff: by default 3
attempts, 1s initial interval doubling up to 10s. Domain exceptions
(TaskgateException) are not retried unless marked retryable; after the
last attempt the original exception is re-raised.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from taskgate.application.dtos.task import CreateTaskInput
from taskgate.application.interfaces.services import ITaskActivities
from taskgate.core.config import Settings, get_settings
from taskgate.domain.exceptions import TaskgateException
from taskgate.domain.value_objects.core import AssignmentTarget
from taskgate.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    if not isinstance(exc, Exception):
        return False
    if isinstance(exc, TaskgateException):
        return exc.retryable
    return True


class RetryingTaskActivities:
    """Wraps an ITaskActivities provider with the configured retry policy."""

    def __init__(
        self,
        inner: ITaskActivities,
        settings: Settings | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        """Initialize.

        Args:
            inner: Provider performing the actual side effects.
            settings: Retry policy source (activity_* settings).
            sleep: Optional sleep coroutine (tests pass a no-op).
        """
        self.inner = inner
        self.settings = settings or get_settings()
        self._sleep = sleep or asyncio.sleep

    def _retrying(self) -> AsyncRetrying:
        s = self.settings
        return AsyncRetrying(
            stop=stop_after_attempt(s.activity_max_attempts),
            wait=wait_exponential(
                multiplier=s.activity_initial_interval_seconds,
                exp_base=s.activity_backoff_coefficient,
                max=s.activity_max_interval_seconds,
            ),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        )

    async def _call(self, name: str, fn: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        result = None
        async for attempt in self._retrying():
            with attempt:
                result = await fn(*args)
        logger.debug("Activity %s succeeded", name)
        return result

    async def create_task(self, task_input: CreateTaskInput) -> str:
        return await self._call("create_task", self.inner.create_task, task_input)

    async def reassign_task(self, task_id: str, target: AssignmentTarget) -> None:
        await self._call("reassign_task", self.inner.reassign_task, task_id, target)

    async def notify_task_urgent(self, task_id: str, message: str | None = None) -> None:
        await self._call("notify_task_urgent", self.inner.notify_task_urgent, task_id, message)

    async def escalate_task(self, task_id: str, target: AssignmentTarget | None = None) -> None:
        await self._call("escalate_task", self.inner.escalate_task, task_id, target)

    async def cancel_task(self, task_id: str, reason: str | None = None) -> None:
        await self._call("cancel_task", self.inner.cancel_task, task_id, reason)
