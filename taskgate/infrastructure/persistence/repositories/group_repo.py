"""Group repository (SQL). Implements IGroupRepository for assignment."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskgate.core.constants import ACTIVE_TASK_STATUSES
from taskgate.domain.entities.group import GroupEntity, GroupMemberEntity
from taskgate.infrastructure.persistence.models.group import Group, GroupMember
from taskgate.infrastructure.persistence.models.task import HumanTask


def _to_entity(group: Group) -> GroupEntity:
    """Map Group ORM (with members and their users) to GroupEntity."""
    return GroupEntity(
        id=group.id,
        name=group.name,
        strategy_tag=group.assignment_strategy,
        is_assignable=group.is_assignable,
        is_deleted=group.deleted_at is not None,
        members=[
            GroupMemberEntity(
                user_id=m.user_id,
                joined_at=m.joined_at,
                user_active=m.user.is_active,
                user_deleted=m.user.deleted_at is not None,
            )
            for m in group.members
        ],
    )


class GroupRepository:
    """Reads groups, members and open task counts.

    Opens a short-lived session per call because the assignment resolver
    outlives any request.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def get_group(self, group_id: str) -> GroupEntity | None:
        async with self.session_factory() as session:
            result = await session.execute(select(Group).where(Group.id == group_id))
            group = result.scalar_one_or_none()
            return _to_entity(group) if group is not None else None

    async def list_eligible_member_ids(self, group_id: str) -> list[str]:
        group = await self.get_group(group_id)
        if group is None:
            return []
        return group.eligible_member_ids()

    async def count_active_tasks(self, user_ids: list[str]) -> dict[str, int]:
        counts = {user_id: 0 for user_id in user_ids}
        if not user_ids:
            return counts
        async with self.session_factory() as session:
            result = await session.execute(
                select(HumanTask.assigned_user_id, func.count(HumanTask.id))
                .where(
                    HumanTask.assigned_user_id.in_(user_ids),
                    HumanTask.status.in_(ACTIVE_TASK_STATUSES),
                )
                .group_by(HumanTask.assigned_user_id)
            )
            for user_id, count in result.all():
                counts[user_id] = count
        return counts
