"""Task endpoints backed by the in-memory task provider.

A person completes or cancels a task here; the provider validates the
submission and signals the owning workflow.
"""

from fastapi import APIRouter, Query

from taskgate.api.v1.dependencies import ActivitiesDep, RuntimeDep
from taskgate.application.services.form_validator import form_schema_to_dict
from taskgate.application.services.sla_calculator import describe_sla
from taskgate.domain.exceptions import ResourceNotFoundException
from taskgate.infrastructure.services import TaskRecord
from taskgate.schemas.task import (
    SLAStatusResponse,
    TaskCancelRequest,
    TaskCompleteRequest,
    TaskResponse,
)

router = APIRouter()


def _to_response(task: TaskRecord) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        workflow_id=task.workflow_id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        assigned_person=task.assigned_person,
        assigned_group=task.assigned_group,
        created_at=task.created_at,
        due_at=task.due_at,
        completed_at=task.completed_at,
        completed_by=task.completed_by,
        result=task.result,
        cancel_reason=task.cancel_reason,
        escalation_count=task.escalation_count,
        form=form_schema_to_dict(task.form),
    )


@router.get("", response_model=list[TaskResponse])
def list_tasks(
    activities: ActivitiesDep,
    workflow_id: str | None = Query(default=None, description="Only tasks of this workflow"),
) -> list[TaskResponse]:
    return [_to_response(t) for t in activities.list_tasks(workflow_id)]


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, activities: ActivitiesDep) -> TaskResponse:
    return _to_response(activities.get_task(task_id))


@router.post("/{task_id}/complete", response_model=TaskResponse)
async def complete_task(
    task_id: str, body: TaskCompleteRequest, activities: ActivitiesDep
) -> TaskResponse:
    """Submit the task form. 422 when the data does not satisfy the form."""
    task = await activities.complete_task(task_id, body.data, body.completed_by)
    return _to_response(task)


@router.post("/{task_id}/cancel", response_model=TaskResponse)
async def cancel_task(
    task_id: str, body: TaskCancelRequest, activities: ActivitiesDep
) -> TaskResponse:
    task = await activities.request_cancellation(task_id, body.reason, body.cancelled_by)
    return _to_response(task)


@router.get("/{task_id}/sla", response_model=SLAStatusResponse)
def get_task_sla(
    task_id: str, activities: ActivitiesDep, runtime: RuntimeDep
) -> SLAStatusResponse:
    """SLA state of the task at the runtime clock's current time."""
    task = activities.get_task(task_id)
    if task.due_at is None:
        raise ResourceNotFoundException("sla", task_id)
    warn = task.warn_before_minutes * 60_000 if task.warn_before_minutes else None
    info = describe_sla(task.due_at, warn, runtime.clock.now())
    return SLAStatusResponse(
        task_id=task.id,
        state=info.state,
        breached=info.breached,
        warning=info.warning,
        time_remaining_ms=info.time_remaining_ms,
        time_remaining=info.time_remaining_formatted,
        deadline=info.deadline,
    )
