"""Workflow endpoints: status, signal delivery and cancellation.

Signals are how an external task store reports that a human completed
or cancelled a task. Delivery is fire-and-forget: 202 once the signal is
queued for the workflow; signals to finished workflows are dropped.
"""

from fastapi import APIRouter, status

from taskgate.api.v1.dependencies import RuntimeDep
from taskgate.application.dtos.signals import TaskCancelledSignal, TaskCompletedSignal
from taskgate.domain.exceptions import TaskgateException
from taskgate.infrastructure.runtime import WorkflowHandle
from taskgate.schemas.workflow import (
    SignalAcceptedResponse,
    TaskCancelledSignalRequest,
    TaskCompletedSignalRequest,
    WorkflowStatusResponse,
)
from taskgate.shared.utils.datetime import ensure_utc, utc_now

router = APIRouter()


def _to_response(handle: WorkflowHandle) -> WorkflowStatusResponse:
    error = handle.error
    payload = None
    if isinstance(error, TaskgateException):
        payload = error.to_dict()
    elif error is not None:
        payload = {"error": "INTERNAL_ERROR", "message": str(error), "details": {}}
    return WorkflowStatusResponse(
        workflow_id=handle.workflow_id,
        run_id=handle.run_id,
        status=handle.status,
        started_at=handle.started_at,
        error=payload,
    )


@router.get("", response_model=list[WorkflowStatusResponse])
def list_workflows(runtime: RuntimeDep) -> list[WorkflowStatusResponse]:
    """List workflows known to this process."""
    return [_to_response(h) for h in runtime.list_handles()]


@router.get("/{workflow_id}", response_model=WorkflowStatusResponse)
def get_workflow(workflow_id: str, runtime: RuntimeDep) -> WorkflowStatusResponse:
    return _to_response(runtime.get_handle(workflow_id))


@router.post(
    "/{workflow_id}/signals/task-completed",
    response_model=SignalAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def signal_task_completed(
    workflow_id: str, body: TaskCompletedSignalRequest, runtime: RuntimeDep
) -> SignalAcceptedResponse:
    """Deliver a taskCompleted signal to the workflow."""
    signal = TaskCompletedSignal(
        task_id=body.task_id,
        data=body.data,
        completed_by=body.completed_by,
        completed_at=ensure_utc(body.completed_at) or utc_now(),
    )
    await runtime.signal(
        workflow_id,
        runtime.settings.signal_task_completed,
        signal.model_dump(by_alias=True, mode="json"),
    )
    return SignalAcceptedResponse(workflow_id=workflow_id)


@router.post(
    "/{workflow_id}/signals/task-cancelled",
    response_model=SignalAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def signal_task_cancelled(
    workflow_id: str, body: TaskCancelledSignalRequest, runtime: RuntimeDep
) -> SignalAcceptedResponse:
    """Deliver a taskCancelled signal to the workflow."""
    signal = TaskCancelledSignal(
        task_id=body.task_id, reason=body.reason, cancelled_by=body.cancelled_by
    )
    await runtime.signal(
        workflow_id,
        runtime.settings.signal_task_cancelled,
        signal.model_dump(by_alias=True, mode="json"),
    )
    return SignalAcceptedResponse(workflow_id=workflow_id)


@router.post(
    "/{workflow_id}/cancel",
    response_model=SignalAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def cancel_workflow(workflow_id: str, runtime: RuntimeDep) -> SignalAcceptedResponse:
    """Cancel the workflow; any task wait in progress ends immediately."""
    await runtime.cancel(workflow_id)
    return SignalAcceptedResponse(workflow_id=workflow_id)
