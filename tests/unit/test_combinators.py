"""all_tasks / any_task against the in-process runtime and in-memory task store."""

import asyncio
import contextlib
from datetime import timedelta

import pytest

from taskgate.application.dtos.task import TaskOptions
from taskgate.application.use_cases.tasks import all_tasks, any_task
from taskgate.domain.exceptions import TaskCancelledException
from taskgate.domain.value_objects.core import AssignmentTarget, FormField, FormSchema, SLAConfig
from taskgate.shared.enums import TaskStatus

NOTE_FORM = FormSchema(fields={"note": FormField(type="text")})


def _options(*titles: str) -> list[TaskOptions]:
    return [
        TaskOptions(title=t, assign_to=AssignmentTarget.to_person(f"user-{t}"), form=NOTE_FORM)
        for t in titles
    ]


def _task_ids(task_store, workflow_id: str) -> dict[str, str]:
    return {t.title: t.id for t in task_store.list_tasks(workflow_id)}


async def test_all_tasks_returns_results_in_config_order(runtime, task_store, clock) -> None:
    async def workflow(ctx):
        return await all_tasks(ctx, _options("legal", "finance"))

    await runtime.start(workflow, workflow_id="wf-all")
    await clock.settle()
    ids = _task_ids(task_store, "wf-all")
    await task_store.complete_task(ids["finance"], {"note": "finance"}, "bob")
    await clock.settle()
    assert not runtime.get_handle("wf-all").task.done()
    await task_store.complete_task(ids["legal"], {"note": "legal"}, "alice")

    results = await runtime.result("wf-all")
    assert [r.data for r in results] == [{"note": "legal"}, {"note": "finance"}]
    assert [r.completed_by for r in results] == ["alice", "bob"]


async def test_all_tasks_fails_fast_and_leaves_siblings_open(runtime, task_store, clock) -> None:
    async def workflow(ctx):
        return await all_tasks(ctx, _options("a", "b", "c"))

    await runtime.start(workflow, workflow_id="wf-fail")
    await clock.settle()
    ids = _task_ids(task_store, "wf-fail")
    await task_store.request_cancellation(ids["b"], "not needed", "carol")

    with pytest.raises(TaskCancelledException) as exc_info:
        await runtime.result("wf-fail")
    assert exc_info.value.task_id == ids["b"]
    assert task_store.get_task(ids["a"]).status is TaskStatus.ASSIGNED
    assert task_store.get_task(ids["c"]).status is TaskStatus.ASSIGNED


async def test_all_tasks_can_cancel_siblings(runtime, task_store, clock) -> None:
    async def workflow(ctx):
        return await all_tasks(ctx, _options("a", "b", "c"), cancel_remaining_on_failure=True)

    await runtime.start(workflow, workflow_id="wf-cascade")
    await clock.settle()
    ids = _task_ids(task_store, "wf-cascade")
    await task_store.complete_task(ids["a"], {}, "alice")
    await task_store.request_cancellation(ids["b"], "rejected")

    with pytest.raises(TaskCancelledException):
        await runtime.result("wf-cascade")
    assert task_store.get_task(ids["a"]).status is TaskStatus.COMPLETED
    sibling = task_store.get_task(ids["c"])
    assert sibling.status is TaskStatus.CANCELLED
    assert sibling.cancel_reason == "Sibling task failed"


async def test_all_tasks_empty(ctx) -> None:
    assert await all_tasks(ctx, []) == []


async def test_any_task_first_completion_cancels_the_rest(runtime, task_store, clock) -> None:
    async def workflow(ctx):
        return await any_task(ctx, _options("x", "y", "z"), cancel_remaining=True)

    await runtime.start(workflow, workflow_id="wf-any")
    await clock.settle()
    ids = _task_ids(task_store, "wf-any")
    await task_store.complete_task(ids["y"], {"note": "y"}, "bob")

    result = await runtime.result("wf-any")
    assert result.task_id == ids["y"]
    assert result.data == {"note": "y"}
    for title in ("x", "z"):
        task = task_store.get_task(ids[title])
        assert task.status is TaskStatus.CANCELLED
        assert task.cancel_reason == "Another task completed first"


async def test_any_task_leaves_others_open_by_default(runtime, task_store, clock) -> None:
    async def workflow(ctx):
        return await any_task(ctx, _options("x", "y"))

    await runtime.start(workflow, workflow_id="wf-any-open")
    await clock.settle()
    ids = _task_ids(task_store, "wf-any-open")
    await task_store.complete_task(ids["x"], {}, "alice")

    assert (await runtime.result("wf-any-open")).task_id == ids["x"]
    assert task_store.get_task(ids["y"]).status is TaskStatus.ASSIGNED


async def test_any_task_tolerates_cancellations(runtime, task_store, clock) -> None:
    async def workflow(ctx):
        return await any_task(ctx, _options("x", "y"))

    await runtime.start(workflow, workflow_id="wf-tolerant")
    await clock.settle()
    ids = _task_ids(task_store, "wf-tolerant")
    await task_store.request_cancellation(ids["x"], "out of office")
    await clock.settle()
    assert not runtime.get_handle("wf-tolerant").task.done()
    await task_store.complete_task(ids["y"], {"note": "second"}, "bob")

    assert (await runtime.result("wf-tolerant")).data == {"note": "second"}


async def test_any_task_raises_first_failure_when_all_fail(runtime, task_store, clock) -> None:
    async def workflow(ctx):
        return await any_task(ctx, _options("x", "y"))

    await runtime.start(workflow, workflow_id="wf-none")
    await clock.settle()
    ids = _task_ids(task_store, "wf-none")
    await task_store.request_cancellation(ids["x"], "first")
    await clock.settle()
    await task_store.request_cancellation(ids["y"], "second")

    with pytest.raises(TaskCancelledException) as exc_info:
        await runtime.result("wf-none")
    assert exc_info.value.reason == "first"


async def test_any_task_requires_tasks(ctx) -> None:
    with pytest.raises(ValueError):
        await any_task(ctx, [])


async def test_shared_sla_applies_only_to_tasks_without_one(ctx, clock, activities) -> None:
    """A task-level SLA wins over the shared one."""
    own, shared = _options("own", "shared")
    own = TaskOptions(title=own.title, assign_to=own.assign_to, sla=SLAConfig(deadline="1h"))
    start = clock.now()
    wait = asyncio.create_task(all_tasks(ctx, [own, shared], sla=SLAConfig(deadline="30m")))
    await clock.settle()

    due = {c.args[0].title: c.args[0].due_at for c in activities.create_task.call_args_list}
    assert due == {"own": start + timedelta(hours=1), "shared": start + timedelta(minutes=30)}
    wait.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await wait
