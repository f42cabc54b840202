"""Domain exceptions for taskgate.

Defines domain-level exceptions for human-task orchestration. These are
independent of infrastructure concerns; the presentation layer maps them
to HTTP responses in exception handlers, and the activity retry wrapper
treats them as non-retryable.
"""

from typing import Any


class TaskgateException(Exception):
    """Base exception for all taskgate errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. task_id, field).
        retryable: Whether a retry of the failing operation may succeed.
    """

    retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses (error, message, details)."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(TaskgateException):
    """Raised when input validation fails (e.g. malformed target or config)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidDurationException(TaskgateException):
    """Raised when a duration value cannot be parsed."""

    def __init__(self, value: Any, reason: str | None = None) -> None:
        """Initialize with the rejected value.

        Args:
            value: The input that failed to parse.
            reason: Optional explanation (e.g. "must be non-negative").
        """
        message = f"Invalid duration: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, "INVALID_DURATION", {"value": str(value)})


class UnknownAssignmentStrategyException(TaskgateException):
    """Raised when an explicit strategy override names no registered strategy."""

    def __init__(self, strategy: str, available: list[str] | None = None) -> None:
        """Initialize with the unknown strategy name.

        Args:
            strategy: The requested strategy name.
            available: Registered strategy names, for the error details.
        """
        super().__init__(
            f"Unknown assignment strategy: {strategy}",
            "UNKNOWN_ASSIGNMENT_STRATEGY",
            {"strategy": strategy, "available": available or []},
        )


class TaskCancelledException(TaskgateException):
    """Raised when a task is cancelled by signal or by an SLA cancel breach.

    Never retryable: the task is gone and the workflow must decide what to do.
    """

    def __init__(
        self,
        task_id: str,
        reason: str | None = None,
        cancelled_by: str | None = None,
        *,
        sla_breach: bool = False,
    ) -> None:
        """Initialize with task id and optional reason / actor.

        Args:
            task_id: The cancelled task.
            reason: Optional cancellation reason.
            cancelled_by: Optional actor that cancelled the task.
            sla_breach: True when the cancellation is the SLA cancel action.
        """
        self.task_id = task_id
        self.reason = reason
        self.cancelled_by = cancelled_by
        self.sla_breach = sla_breach
        if sla_breach:
            message = f"Task {task_id} cancelled due to SLA breach"
            code = "SLA_BREACH_CANCEL"
        else:
            message = f"Task {task_id} was cancelled: {reason or 'No reason provided'}"
            code = "TASK_CANCELLED"
        details: dict[str, Any] = {"task_id": task_id}
        if reason:
            details["reason"] = reason
        if cancelled_by:
            details["cancelled_by"] = cancelled_by
        super().__init__(message, code, details)


class TaskResolutionException(TaskgateException):
    """Raised when a task wait ends in an inconsistent state.

    Covers the wait loop exiting with neither payload, and illegal
    state machine transitions.
    """

    def __init__(self, task_id: str | None, message: str | None = None) -> None:
        """Initialize with the task id and optional message.

        Args:
            task_id: Task being waited on (None before creation).
            message: Optional explanation.
        """
        super().__init__(
            message or f"Task {task_id} resolved without completion or cancellation",
            "TASK_RESOLUTION_ERROR",
            {"task_id": task_id},
        )


class WorkflowCancelledException(TaskgateException):
    """Raised inside a workflow when the enclosing workflow is cancelled."""

    def __init__(self, workflow_id: str) -> None:
        """Initialize with the cancelled workflow id.

        Args:
            workflow_id: The workflow that was cancelled.
        """
        super().__init__(
            f"Workflow {workflow_id} was cancelled",
            "WORKFLOW_CANCELLED",
            {"workflow_id": workflow_id},
        )


class FormValidationException(TaskgateException):
    """Raised when submitted task data does not satisfy the task form."""

    def __init__(self, errors: dict[str, str]) -> None:
        """Initialize with per-field error messages.

        Args:
            errors: Mapping of field name to error message.
        """
        fields = ", ".join(sorted(errors))
        super().__init__(
            f"Form validation failed: {fields}",
            "FORM_VALIDATION_ERROR",
            {"errors": errors},
        )


class ResourceNotFoundException(TaskgateException):
    """Raised when a requested resource (task, group, workflow) does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'task', 'group').
            resource_id: ID of the resource that was not found.
        """
        super().__init__(
            f"{resource_type.capitalize()} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SqlNotConfiguredException(TaskgateException):
    """Raised when a SQL-backed repository is used without DATABASE_BACKEND=postgres."""

    def __init__(self) -> None:
        super().__init__(
            "SQL database not configured: set DATABASE_BACKEND=postgres and DATABASE_URL",
            "SQL_NOT_CONFIGURED",
        )


class WorkflowNotFoundException(ResourceNotFoundException):
    """Raised when a signal or query targets an unknown workflow id."""

    def __init__(self, workflow_id: str) -> None:
        super().__init__("workflow", workflow_id)
        self.workflow_id = workflow_id
