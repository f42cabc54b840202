"""In-memory group directory (implements IGroupRepository).

Used when database_backend is 'memory' and in tests.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from taskgate.domain.entities.group import GroupEntity

TaskCounter = Callable[[list[str]], dict[str, int]]


class InMemoryGroupRepository:
    """Groups kept in a dict; open task counts come from task_counter."""

    def __init__(
        self,
        groups: Iterable[GroupEntity] = (),
        task_counter: TaskCounter | None = None,
    ) -> None:
        self._groups: dict[str, GroupEntity] = {g.id: g for g in groups}
        self.task_counter = task_counter

    def add_group(self, group: GroupEntity) -> None:
        """Add or replace a group."""
        self._groups[group.id] = group

    async def get_group(self, group_id: str) -> GroupEntity | None:
        return self._groups.get(group_id)

    async def list_eligible_member_ids(self, group_id: str) -> list[str]:
        group = self._groups.get(group_id)
        if group is None:
            return []
        return group.eligible_member_ids()

    async def count_active_tasks(self, user_ids: list[str]) -> dict[str, int]:
        if self.task_counter is None:
            return {user_id: 0 for user_id in user_ids}
        counts = self.task_counter(list(user_ids))
        return {user_id: counts.get(user_id, 0) for user_id in user_ids}
