"""Group and member domain entities used for assignment.

Records are owned by the external store; these are read-only views.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class GroupMemberEntity:
    """A user's membership in a group."""

    user_id: str
    joined_at: datetime
    user_active: bool = True
    user_deleted: bool = False

    @property
    def is_eligible(self) -> bool:
        """Return whether this member may receive tasks."""
        return self.user_active and not self.user_deleted


@dataclass
class GroupEntity:
    """Assignable group of users with a strategy tag."""

    id: str
    name: str
    strategy_tag: str | None = "round_robin"
    is_assignable: bool = True
    is_deleted: bool = False
    members: list[GroupMemberEntity] = field(default_factory=list)

    @property
    def member_count(self) -> int:
        return len(self.members)

    def accepts_assignments(self) -> bool:
        """Return whether tasks may be routed to this group's members."""
        return self.is_assignable and not self.is_deleted

    def eligible_member_ids(self) -> list[str]:
        """Return eligible member ids ordered by ascending join time.

        Empty when the group itself does not accept assignments.
        """
        if not self.accepts_assignments():
            return []
        ordered = sorted(self.members, key=lambda m: m.joined_at)
        return [m.user_id for m in ordered if m.is_eligible]
