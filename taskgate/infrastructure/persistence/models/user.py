"""User ORM model (task assignees)."""

from sqlalchemy import Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column

from taskgate.infrastructure.persistence.database import Base
from taskgate.infrastructure.persistence.models.mixins import (
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
)


class User(CuidMixin, TimestampMixin, SoftDeleteMixin, Base):
    """User who can receive tasks. Table: app_user."""

    __tablename__ = "app_user"

    username: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
