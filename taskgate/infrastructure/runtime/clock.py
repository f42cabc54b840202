"""Workflow clocks: wall-clock timers and a manually advanced clock for tests."""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Protocol

from taskgate.shared.utils.datetime import add_ms, utc_now
from taskgate.shared.utils.duration import Duration, parse_duration


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class WorkflowClock(Protocol):
    """Time source and timer scheduler for workflow contexts."""

    def now(self) -> datetime: ...

    def call_at(self, when: datetime, callback: Callable[[], None]) -> TimerHandle: ...


class SystemClock:
    """Wall-clock time; timers run on the event loop."""

    def now(self) -> datetime:
        return utc_now()

    def call_at(self, when: datetime, callback: Callable[[], None]) -> asyncio.TimerHandle:
        delay = max(0.0, (when - self.now()).total_seconds())
        return asyncio.get_running_loop().call_later(delay, callback)


class _ManualTimer:
    __slots__ = ("when", "callback", "cancelled")

    def __init__(self, when: datetime, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualClock:
    """Clock that only moves when advance() is called.

    Timers fire in instant order; after each one the event loop is given
    settle_rounds turns so woken workflow code runs (and may schedule
    further timers) before time moves on.
    """

    def __init__(self, start: datetime | None = None, settle_rounds: int = 50) -> None:
        self._now = start or datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
        self._timers: list[tuple[datetime, int, _ManualTimer]] = []
        self._seq = itertools.count()
        self.settle_rounds = settle_rounds

    def now(self) -> datetime:
        return self._now

    def call_at(self, when: datetime, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(when, callback)
        heapq.heappush(self._timers, (when, next(self._seq), timer))
        return timer

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, t in self._timers if not t.cancelled)

    async def settle(self) -> None:
        """Let runnable coroutines proceed without moving time."""
        for _ in range(self.settle_rounds):
            await asyncio.sleep(0)

    async def advance(self, delta: Duration | timedelta) -> None:
        """Move time forward by delta, firing due timers in order."""
        if isinstance(delta, timedelta):
            target = self._now + delta
        else:
            target = add_ms(self._now, parse_duration(delta))
        await self.advance_to(target)

    async def advance_to(self, target: datetime) -> None:
        await self.settle()
        while self._timers and self._timers[0][0] <= target:
            when, _, timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            if when > self._now:
                self._now = when
            timer.callback()
            await self.settle()
        if target > self._now:
            self._now = target
        await self.settle()
