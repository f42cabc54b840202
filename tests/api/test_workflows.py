"""Workflow status, signal and cancel endpoints."""

from datetime import UTC, datetime

import pytest
from httpx import AsyncClient

from taskgate.application.dtos.task import TaskOptions
from taskgate.application.use_cases.tasks import run_task
from taskgate.domain.exceptions import TaskCancelledException
from taskgate.domain.value_objects.core import AssignmentTarget, FormField, FormSchema
from taskgate.main import app

FORM = FormSchema(fields={"approved": FormField(type="boolean", required=True)})


async def approval(ctx):
    result = await run_task(
        ctx,
        TaskOptions(title="Approve", assign_to=AssignmentTarget.to_person("alice"), form=FORM),
    )
    return result.data


@pytest.fixture
async def started(client: AsyncClient, settle):
    """A running approval workflow with its task created."""
    runtime = app.state.runtime
    handle = await runtime.start(approval, workflow_id="wf-api")
    await settle()
    task = app.state.activities.list_tasks("wf-api")[0]
    return handle, task


async def test_get_running_workflow(client: AsyncClient, started) -> None:
    response = await client.get("/api/v1/workflows/wf-api")
    assert response.status_code == 200
    body = response.json()
    assert body["workflow_id"] == "wf-api"
    assert body["status"] == "running"
    assert body["error"] is None


async def test_list_workflows(client: AsyncClient, started) -> None:
    response = await client.get("/api/v1/workflows")
    assert response.status_code == 200
    assert [w["workflow_id"] for w in response.json()] == ["wf-api"]


async def test_unknown_workflow_is_404(client: AsyncClient) -> None:
    response = await client.get("/api/v1/workflows/missing")
    assert response.status_code == 404
    assert response.json()["error"] == "RESOURCE_NOT_FOUND"


async def test_task_completed_signal(client: AsyncClient, started) -> None:
    handle, task = started
    response = await client.post(
        "/api/v1/workflows/wf-api/signals/task-completed",
        json={"taskId": task.id, "data": {"approved": True}, "completedBy": "alice"},
    )
    assert response.status_code == 202
    assert response.json() == {"workflow_id": "wf-api", "accepted": True}
    assert await handle.task == {"approved": True}

    response = await client.get("/api/v1/workflows/wf-api")
    assert response.json()["status"] == "completed"


async def test_task_cancelled_signal_fails_workflow(client: AsyncClient, started) -> None:
    handle, task = started
    response = await client.post(
        "/api/v1/workflows/wf-api/signals/task-cancelled",
        json={"taskId": task.id, "reason": "withdrawn", "cancelledBy": "bob"},
    )
    assert response.status_code == 202
    with pytest.raises(TaskCancelledException):
        await handle.task

    body = (await client.get("/api/v1/workflows/wf-api")).json()
    assert body["status"] == "failed"
    assert body["error"]["error"] == "TASK_CANCELLED"
    assert body["error"]["details"]["reason"] == "withdrawn"


async def test_naive_completed_at_is_read_as_utc(client: AsyncClient, settle) -> None:
    async def review(ctx):
        return await run_task(
            ctx,
            TaskOptions(title="Review", assign_to=AssignmentTarget.to_person("alice"), form=FORM),
        )

    handle = await app.state.runtime.start(review, workflow_id="wf-naive")
    await settle()
    task_id = app.state.activities.list_tasks("wf-naive")[0].id

    response = await client.post(
        "/api/v1/workflows/wf-naive/signals/task-completed",
        json={
            "taskId": task_id,
            "data": {"approved": False},
            "completedBy": "alice",
            "completedAt": "2024-03-01T12:00:00",
        },
    )
    assert response.status_code == 202
    result = await handle.task
    assert result.completed_at == datetime(2024, 3, 1, 12, tzinfo=UTC)


async def test_signal_requires_completed_by(client: AsyncClient, started) -> None:
    _, task = started
    response = await client.post(
        "/api/v1/workflows/wf-api/signals/task-completed",
        json={"taskId": task.id, "data": {}},
    )
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_signal_to_unknown_workflow_is_404(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/workflows/nope/signals/task-cancelled", json={"taskId": "t1"}
    )
    assert response.status_code == 404


async def test_cancel_workflow(client: AsyncClient, started, settle) -> None:
    handle, _ = started
    response = await client.post("/api/v1/workflows/wf-api/cancel")
    assert response.status_code == 202
    await settle()

    body = (await client.get("/api/v1/workflows/wf-api")).json()
    assert body["status"] == "cancelled"
    assert body["error"]["error"] == "WORKFLOW_CANCELLED"
