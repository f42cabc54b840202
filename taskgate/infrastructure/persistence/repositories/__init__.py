"""Repositories: SQL and in-memory implementations of the repository ports."""

from taskgate.infrastructure.persistence.repositories.group_repo import GroupRepository
from taskgate.infrastructure.persistence.repositories.memory_group_repo import (
    InMemoryGroupRepository,
)
from taskgate.infrastructure.persistence.repositories.task_repo import HumanTaskRepository

__all__ = ["GroupRepository", "HumanTaskRepository", "InMemoryGroupRepository"]
