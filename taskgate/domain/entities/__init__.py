"""Domain entities. Pure domain models; no ORM or persistence concerns."""

from taskgate.domain.entities.group import GroupEntity, GroupMemberEntity

__all__ = ["GroupEntity", "GroupMemberEntity"]
