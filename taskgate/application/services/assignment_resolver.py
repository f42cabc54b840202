"""Assignment resolution: turn an AssignmentTarget into a concrete assignee.

Strategies pick one member of a group. The resolver maps a group's
stored strategy tag to a registered strategy; only an explicit override
naming an unregistered strategy is an error.
"""

from __future__ import annotations

import asyncio

from taskgate.application.dtos.task import ResolvedAssignment
from taskgate.application.interfaces.repositories import (
    IGroupRepository,
    IRoundRobinCursorStore,
)
from taskgate.application.interfaces.services import IAssignmentStrategy
from taskgate.domain.enums import AssignmentStrategyType
from taskgate.domain.exceptions import UnknownAssignmentStrategyException
from taskgate.domain.value_objects.core import AssignmentTarget
from taskgate.shared.telemetry.logging import get_logger
from taskgate.shared.telemetry.tracing import traced

logger = get_logger(__name__)


class InMemoryRoundRobinCursorStore:
    """Process-local round-robin cursors (lost on restart).

    A lock serializes read-increment-write so concurrent resolutions in
    one event loop never hand out the same index twice.
    """

    def __init__(self) -> None:
        self._last: dict[str, int] = {}
        self._lock = asyncio.Lock()

    async def next_index(self, group_id: str, size: int) -> int:
        async with self._lock:
            nxt = (self._last.get(group_id, -1) + 1) % size
            self._last[group_id] = nxt
            return nxt

    async def reset(self, group_id: str | None = None) -> None:
        async with self._lock:
            if group_id is None:
                self._last.clear()
            else:
                self._last.pop(group_id, None)


class RoundRobinStrategy:
    """Cycle through eligible members in join order."""

    name = AssignmentStrategyType.ROUND_ROBIN.value

    def __init__(
        self,
        group_repo: IGroupRepository,
        cursor_store: IRoundRobinCursorStore | None = None,
    ) -> None:
        self.group_repo = group_repo
        self.cursor_store = cursor_store or InMemoryRoundRobinCursorStore()

    async def select_member(self, group_id: str) -> str | None:
        members = await self.group_repo.list_eligible_member_ids(group_id)
        if not members:
            return None
        index = await self.cursor_store.next_index(group_id, len(members))
        return members[index]

    async def reset(self, group_id: str | None = None) -> None:
        """Forget the cursor for one group, or for all groups."""
        await self.cursor_store.reset(group_id)


class LoadBalancedStrategy:
    """Pick the eligible member with the fewest open tasks (ties: earliest joined)."""

    name = AssignmentStrategyType.LOAD_BALANCED.value

    def __init__(self, group_repo: IGroupRepository) -> None:
        self.group_repo = group_repo

    async def select_member(self, group_id: str) -> str | None:
        members = await self.group_repo.list_eligible_member_ids(group_id)
        if not members:
            return None
        counts = await self.group_repo.count_active_tasks(members)
        selected = None
        fewest = None
        for user_id in members:
            count = counts.get(user_id, 0)
            if fewest is None or count < fewest:
                fewest = count
                selected = user_id
        return selected


class DirectStrategy:
    """Never selects anyone; the group itself is the assignee."""

    name = AssignmentStrategyType.DIRECT.value

    async def select_member(self, group_id: str) -> str | None:
        return None


class AssignmentResolver:
    """Resolves targets using registered strategies."""

    def __init__(
        self,
        group_repo: IGroupRepository,
        strategies: dict[str, IAssignmentStrategy] | None = None,
        cursor_store: IRoundRobinCursorStore | None = None,
    ) -> None:
        """Initialize with the built-in strategies unless a mapping is given.

        Args:
            group_repo: Read access to groups and members.
            strategies: Optional name -> strategy mapping replacing the built-ins.
            cursor_store: Round-robin cursor store for the built-in round-robin strategy.
        """
        self.group_repo = group_repo
        if strategies is None:
            strategies = {
                AssignmentStrategyType.ROUND_ROBIN.value: RoundRobinStrategy(group_repo, cursor_store),
                AssignmentStrategyType.LOAD_BALANCED.value: LoadBalancedStrategy(group_repo),
                AssignmentStrategyType.DIRECT.value: DirectStrategy(),
            }
        self._strategies: dict[str, IAssignmentStrategy] = dict(strategies)

    def register_strategy(self, name: str | AssignmentStrategyType, strategy: IAssignmentStrategy) -> None:
        """Add or replace a strategy under name."""
        self._strategies[str(getattr(name, "value", name))] = strategy

    def get_strategy(self, name: str | AssignmentStrategyType) -> IAssignmentStrategy | None:
        return self._strategies.get(str(getattr(name, "value", name)))

    @property
    def strategy_names(self) -> list[str]:
        return sorted(self._strategies)

    async def _group_strategy(self, group_id: str) -> str:
        group = await self.group_repo.get_group(group_id)
        if group is None or group.is_deleted:
            logger.debug("Group %s not found; falling back to round_robin", group_id)
            return AssignmentStrategyType.ROUND_ROBIN.value
        return AssignmentStrategyType.from_group_tag(group.strategy_tag).value

    @traced("assignment.resolve")
    async def resolve(
        self,
        target: AssignmentTarget | None,
        strategy_override: str | AssignmentStrategyType | None = None,
    ) -> ResolvedAssignment:
        """Resolve a target.

        - person set: returned as-is with strategy direct.
        - no group: unassigned (both None), strategy direct.
        - group: override or the group's strategy picks a member (may be None).

        Raises:
            UnknownAssignmentStrategyException: Override names no registered strategy.
        """
        if target is not None and target.person:
            return ResolvedAssignment(
                person_id=target.person,
                group_id=target.group,
                strategy=AssignmentStrategyType.DIRECT,
            )
        if target is None or not target.group:
            return ResolvedAssignment(None, None, AssignmentStrategyType.DIRECT)

        if strategy_override is not None:
            name = str(getattr(strategy_override, "value", strategy_override))
            strategy = self._strategies.get(name)
            if strategy is None:
                raise UnknownAssignmentStrategyException(name, self.strategy_names)
        else:
            name = await self._group_strategy(target.group)
            strategy = self._strategies.get(name)
            if strategy is None:
                logger.warning(
                    "Strategy %s for group %s not registered; using round_robin",
                    name, target.group,
                )
                name = AssignmentStrategyType.ROUND_ROBIN.value
                strategy = self._strategies.get(name)
                if strategy is None:
                    raise UnknownAssignmentStrategyException(name, self.strategy_names)

        person_id = await strategy.select_member(target.group)
        if person_id is None and name != AssignmentStrategyType.DIRECT.value:
            logger.info("No eligible member in group %s (%s)", target.group, name)
        strategy_tag: AssignmentStrategyType | str = name
        if name in AssignmentStrategyType.values():
            strategy_tag = AssignmentStrategyType(name)
        return ResolvedAssignment(person_id=person_id, group_id=target.group, strategy=strategy_tag)
