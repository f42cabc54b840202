"""Tests for domain exceptions (error_code, message, details)."""

from taskgate.domain.exceptions import (
    FormValidationException,
    InvalidDurationException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    TaskCancelledException,
    TaskgateException,
    TaskResolutionException,
    UnknownAssignmentStrategyException,
    ValidationException,
    WorkflowCancelledException,
    WorkflowNotFoundException,
)


def test_taskgate_exception_default_error_code() -> None:
    """Base TaskgateException uses class name as error_code when not provided."""
    exc = TaskgateException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "TaskgateException"
    assert exc.details == {}
    assert exc.retryable is False


def test_to_dict() -> None:
    exc = TaskgateException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    exc = ValidationException("Invalid format", field="assign_to")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "assign_to"}
    assert ValidationException("Invalid").details == {}


def test_invalid_duration_exception() -> None:
    exc = InvalidDurationException("10x", "bad unit")
    assert exc.error_code == "INVALID_DURATION"
    assert exc.message == "Invalid duration: '10x' (bad unit)"
    assert exc.details == {"value": "10x"}


def test_unknown_strategy_lists_available() -> None:
    exc = UnknownAssignmentStrategyException("coin_flip", ["direct", "round_robin"])
    assert exc.error_code == "UNKNOWN_ASSIGNMENT_STRATEGY"
    assert exc.details == {"strategy": "coin_flip", "available": ["direct", "round_robin"]}


def test_task_cancelled_by_signal() -> None:
    exc = TaskCancelledException("task-1", "duplicate", "bob")
    assert exc.error_code == "TASK_CANCELLED"
    assert exc.message == "Task task-1 was cancelled: duplicate"
    assert exc.details == {"task_id": "task-1", "reason": "duplicate", "cancelled_by": "bob"}
    assert exc.sla_breach is False
    assert exc.retryable is False


def test_task_cancelled_without_reason() -> None:
    exc = TaskCancelledException("task-1")
    assert exc.message == "Task task-1 was cancelled: No reason provided"
    assert exc.details == {"task_id": "task-1"}


def test_task_cancelled_by_sla_breach() -> None:
    exc = TaskCancelledException("task-1", "SLA breached", sla_breach=True)
    assert exc.error_code == "SLA_BREACH_CANCEL"
    assert exc.message == "Task task-1 cancelled due to SLA breach"
    assert exc.reason == "SLA breached"


def test_task_resolution_exception() -> None:
    exc = TaskResolutionException("task-1")
    assert exc.error_code == "TASK_RESOLUTION_ERROR"
    assert "task-1" in exc.message
    assert TaskResolutionException(None, "custom").message == "custom"


def test_workflow_exceptions() -> None:
    cancelled = WorkflowCancelledException("wf-1")
    assert cancelled.error_code == "WORKFLOW_CANCELLED"
    assert cancelled.details == {"workflow_id": "wf-1"}
    missing = WorkflowNotFoundException("wf-9")
    assert isinstance(missing, ResourceNotFoundException)
    assert missing.error_code == "RESOURCE_NOT_FOUND"
    assert missing.message == "Workflow not found: wf-9"


def test_form_validation_exception() -> None:
    exc = FormValidationException({"b": "B is required", "a": "A must be a number"})
    assert exc.error_code == "FORM_VALIDATION_ERROR"
    assert exc.message == "Form validation failed: a, b"


def test_sql_not_configured() -> None:
    assert SqlNotConfiguredException().error_code == "SQL_NOT_CONFIGURED"
