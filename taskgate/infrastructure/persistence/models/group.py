"""Group and membership ORM models used for task assignment."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from taskgate.infrastructure.persistence.database import Base
from taskgate.infrastructure.persistence.models.mixins import (
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
)
from taskgate.infrastructure.persistence.models.user import User


class Group(CuidMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Assignable group. Table: task_group.

    assignment_strategy holds the strategy tag (round_robin, load_balanced,
    direct or a legacy tag such as least_loaded / manual / random).
    """

    __tablename__ = "task_group"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    assignment_strategy: Mapped[str | None] = mapped_column(
        String(32), nullable=True, server_default="round_robin"
    )
    is_assignable: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )

    members: Mapped[list["GroupMember"]] = relationship(
        back_populates="group", lazy="selectin", order_by="GroupMember.joined_at"
    )


class GroupMember(CuidMixin, Base):
    """Membership of a user in a group. Table: task_group_member."""

    __tablename__ = "task_group_member"

    group_id: Mapped[str] = mapped_column(
        String, ForeignKey("task_group.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    group: Mapped[Group] = relationship(back_populates="members")
    user: Mapped[User] = relationship(lazy="joined")

    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_member"),)
