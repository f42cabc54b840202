"""GroupRepository against Postgres (skipped without DATABASE_BACKEND=postgres)."""

from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta

import pytest

from taskgate.application.services.assignment_resolver import AssignmentResolver
from taskgate.domain.value_objects.core import AssignmentTarget
from taskgate.infrastructure.persistence.models import Group, GroupMember, HumanTask, User
from taskgate.infrastructure.persistence.repositories import GroupRepository

pytestmark = pytest.mark.requires_db

T0 = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture
def repo(db_session) -> GroupRepository:
    """Repository whose sessions all reuse the test session (rolled back afterwards)."""

    @asynccontextmanager
    async def shared_session():
        yield db_session

    return GroupRepository(shared_session)


@pytest.fixture
async def support_group(db_session) -> str:
    users = [
        User(username=name, is_active=active, deleted_at=None)
        for name, active in (("ann", True), ("ben", True), ("cid", False))
    ]
    group = Group(
        name="Support",
        assignment_strategy="least_loaded",
        is_assignable=True,
        deleted_at=None,
    )
    for i, user in enumerate(users):
        group.members.append(GroupMember(user=user, joined_at=T0 + timedelta(days=i)))
    db_session.add(group)
    await db_session.flush()
    group_id = group.id
    db_session.expire_all()
    return group_id


async def test_get_group_maps_members_in_join_order(repo, support_group) -> None:
    group = await repo.get_group(support_group)
    assert group is not None
    assert group.name == "Support"
    assert group.strategy_tag == "least_loaded"
    assert [m.user_active for m in group.members] == [True, True, False]


async def test_eligible_members_exclude_inactive_users(repo, support_group) -> None:
    ids = await repo.list_eligible_member_ids(support_group)
    group = await repo.get_group(support_group)
    assert ids == [m.user_id for m in group.members[:2]]


async def test_unknown_group(repo) -> None:
    assert await repo.get_group("missing") is None
    assert await repo.list_eligible_member_ids("missing") == []


async def test_count_active_tasks(repo, db_session, support_group) -> None:
    ann, ben = await repo.list_eligible_member_ids(support_group)
    statuses = ((ann, "assigned"), (ann, "in_progress"), (ann, "completed"), (ben, "cancelled"))
    for assignee, status in statuses:
        db_session.add(
            HumanTask(
                workflow_id="wf-1",
                run_id="run-1",
                title="Ticket",
                form_schema={"fields": {}},
                status=status,
                assigned_user_id=assignee,
            )
        )
    await db_session.flush()

    assert await repo.count_active_tasks([ann, ben, "nobody"]) == {ann: 2, ben: 0, "nobody": 0}
    assert await repo.count_active_tasks([]) == {}


async def test_load_balanced_resolution(repo, db_session, support_group) -> None:
    ann, ben = await repo.list_eligible_member_ids(support_group)
    db_session.add(
        HumanTask(workflow_id="wf-1", run_id="run-1", title="Busy", form_schema={}, assigned_user_id=ann)
    )
    await db_session.flush()

    resolved = await AssignmentResolver(repo).resolve(AssignmentTarget.to_group(support_group))
    assert resolved.person_id == ben
    assert resolved.group_id == support_group
