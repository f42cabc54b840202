"""In-memory task provider: task lifecycle, notifications and workflow signals."""

from unittest.mock import AsyncMock

import pytest

from taskgate.application.dtos.task import CreateTaskInput
from taskgate.domain.enums import FormFieldType, TaskPriority
from taskgate.domain.exceptions import (
    FormValidationException,
    ResourceNotFoundException,
    ValidationException,
)
from taskgate.domain.value_objects.core import AssignmentTarget, FormField, FormSchema
from taskgate.shared.enums import TaskStatus

FORM = FormSchema(
    fields={
        "approved": FormField(type=FormFieldType.BOOLEAN, required=True),
        "comment": FormField(type=FormFieldType.TEXT, default=""),
    }
)


def _input(target: AssignmentTarget | None, **kwargs) -> CreateTaskInput:
    return CreateTaskInput(
        workflow_id="wf-1",
        run_id="run-1",
        title="Approve expense",
        form=kwargs.pop("form", FORM),
        assign_to=target,
        **kwargs,
    )


@pytest.fixture
def sink() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def store(task_store, sink):
    task_store.attach_signal_sink(sink)
    return task_store


async def test_create_task_records_assignment(store) -> None:
    task_id = await store.create_task(_input(AssignmentTarget.to_person("alice", "finance")))
    task = store.get_task(task_id)
    assert task.status is TaskStatus.ASSIGNED
    assert task.assigned_person == "alice"
    assert task.assigned_group == "finance"
    assert task.history[0]["event"] == "created"


async def test_group_and_unassigned_tasks_are_pending(store) -> None:
    group_task = store.get_task(await store.create_task(_input(AssignmentTarget.to_group("ops"))))
    open_task = store.get_task(await store.create_task(_input(None)))
    assert group_task.status is TaskStatus.PENDING
    assert open_task.status is TaskStatus.PENDING
    assert open_task.recipients == []


async def test_complete_validates_and_signals(store, sink) -> None:
    task_id = await store.create_task(_input(AssignmentTarget.to_person("alice")))
    task = await store.complete_task(task_id, {"approved": True}, "alice")

    assert task.status is TaskStatus.COMPLETED
    assert task.result == {"approved": True, "comment": ""}
    sink.signal.assert_awaited_once()
    workflow_id, name, payload = sink.signal.await_args.args
    assert (workflow_id, name) == ("wf-1", "taskCompleted")
    assert payload["taskId"] == task_id
    assert payload["completedBy"] == "alice"
    assert payload["data"] == {"approved": True, "comment": ""}


async def test_complete_rejects_invalid_form(store, sink) -> None:
    task_id = await store.create_task(_input(AssignmentTarget.to_person("alice")))
    with pytest.raises(FormValidationException):
        await store.complete_task(task_id, {"comment": "missing approval"}, "alice")
    assert store.get_task(task_id).status is TaskStatus.ASSIGNED
    sink.signal.assert_not_awaited()


async def test_complete_twice_is_rejected(store) -> None:
    task_id = await store.create_task(_input(AssignmentTarget.to_person("alice")))
    await store.complete_task(task_id, {"approved": False}, "alice")
    with pytest.raises(ValidationException):
        await store.complete_task(task_id, {"approved": True}, "alice")


async def test_request_cancellation_signals(store, sink) -> None:
    task_id = await store.create_task(_input(AssignmentTarget.to_person("alice")))
    task = await store.request_cancellation(task_id, "duplicate", "bob")
    assert task.status is TaskStatus.CANCELLED
    sink.signal.assert_awaited_once_with(
        "wf-1", "taskCancelled", {"taskId": task_id, "reason": "duplicate", "cancelledBy": "bob"}
    )


async def test_cancel_task_is_idempotent(store, sink) -> None:
    task_id = await store.create_task(_input(AssignmentTarget.to_person("alice")))
    await store.cancel_task(task_id, "SLA breached")
    await store.cancel_task(task_id, "again")
    task = store.get_task(task_id)
    assert task.status is TaskStatus.CANCELLED
    assert task.cancel_reason == "SLA breached"
    sink.signal.assert_not_awaited()


async def test_escalate_reassigns_and_notifies(store, notifier) -> None:
    task_id = await store.create_task(_input(AssignmentTarget.to_person("alice", "support")))
    await store.escalate_task(task_id, AssignmentTarget.to_group("managers"))
    task = store.get_task(task_id)
    assert task.priority is TaskPriority.URGENT
    assert task.escalation_count == 1
    assert task.assigned_person is None
    assert task.assigned_group == "managers"
    assert task.status is TaskStatus.PENDING
    recipients, subject, _ = notifier.sent[-1]
    assert recipients == ["managers"]
    assert subject == "Escalated: Approve expense"


async def test_notify_urgent_uses_message(store, notifier) -> None:
    task_id = await store.create_task(_input(AssignmentTarget.to_person("alice")))
    await store.notify_task_urgent(task_id, "Please look today")
    assert notifier.sent[-1] == (["alice"], "Urgent: Approve expense", "Please look today")
    assert store.get_task(task_id).priority is TaskPriority.URGENT


async def test_reassign_task(store) -> None:
    task_id = await store.create_task(_input(AssignmentTarget.to_group("ops")))
    await store.reassign_task(task_id, AssignmentTarget.to_person("bob"))
    task = store.get_task(task_id)
    assert task.assigned_person == "bob"
    assert task.assigned_group == "ops"
    assert task.status is TaskStatus.ASSIGNED


async def test_unknown_task(store) -> None:
    with pytest.raises(ResourceNotFoundException):
        await store.cancel_task("nope")


async def test_count_active_by_user(store) -> None:
    first = await store.create_task(_input(AssignmentTarget.to_person("alice")))
    await store.create_task(_input(AssignmentTarget.to_person("alice")))
    await store.create_task(_input(AssignmentTarget.to_person("bob")))
    await store.cancel_task(first)
    assert store.count_active_by_user(["alice", "bob", "carol"]) == {"alice": 1, "bob": 1, "carol": 0}
    assert [t.workflow_id for t in store.list_tasks("wf-1")] == ["wf-1"] * 3
    assert store.list_tasks("other") == []
