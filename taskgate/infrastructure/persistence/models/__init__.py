"""Persistence models: ORM entities and mixins."""

from taskgate.infrastructure.persistence.models.group import Group, GroupMember
from taskgate.infrastructure.persistence.models.mixins import (
    CuidMixin,
    SoftDeleteMixin,
    TimestampMixin,
)
from taskgate.infrastructure.persistence.models.task import HumanTask
from taskgate.infrastructure.persistence.models.user import User

__all__ = [
    "CuidMixin",
    "Group",
    "GroupMember",
    "HumanTask",
    "SoftDeleteMixin",
    "TimestampMixin",
    "User",
]
