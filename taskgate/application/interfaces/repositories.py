"""Repository interfaces (ports) for the application layer.

The group/member/task records live in an external store; taskgate only
reads them for assignment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from taskgate.domain.entities.group import GroupEntity


class IGroupRepository(Protocol):
    """Read access to groups, their members and members' open work."""

    async def get_group(self, group_id: str) -> GroupEntity | None:
        """Return the group (with members) or None when it does not exist."""

    async def list_eligible_member_ids(self, group_id: str) -> list[str]:
        """Return ids of active, non-deleted members of an assignable, non-deleted group.

        Ordered by ascending join time. Empty when the group is missing,
        deleted or not assignable.
        """

    async def count_active_tasks(self, user_ids: list[str]) -> dict[str, int]:
        """Return open task counts (pending, assigned, in_progress) per user id.

        Users with no open tasks map to 0.
        """


class IRoundRobinCursorStore(Protocol):
    """Per-group round-robin cursor."""

    async def next_index(self, group_id: str, size: int) -> int:
        """Atomically advance the group's cursor and return (last + 1) mod size."""

    async def reset(self, group_id: str | None = None) -> None:
        """Reset one group's cursor, or all cursors when group_id is None."""
