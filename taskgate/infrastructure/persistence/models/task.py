"""Human task ORM model. Tasks created by workflows and resolved by people."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from taskgate.infrastructure.persistence.database import Base
from taskgate.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class HumanTask(CuidMixin, TimestampMixin, Base):
    """Task waiting on a human. Table: human_task."""

    __tablename__ = "human_task"

    workflow_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    run_id: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    form_schema: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    context: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="pending", server_default="pending"
    )
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default="medium", server_default="medium"
    )
    assigned_user_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    assigned_group_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("task_group.id", ondelete="SET NULL"), nullable=True, index=True
    )
    due_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    warn_before_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    escalation_config: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    escalation_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    result: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    __table_args__ = (
        Index("ix_human_task_assignee_status", "assigned_user_id", "status"),
        Index("ix_human_task_status_due", "status", "due_at"),
    )
