"""Domain value objects."""

from taskgate.domain.value_objects.core import (
    AssignmentTarget,
    EscalationStep,
    FormField,
    FormSchema,
    SelectOption,
    SLAConfig,
)

__all__ = [
    "AssignmentTarget",
    "EscalationStep",
    "FormField",
    "FormSchema",
    "SelectOption",
    "SLAConfig",
]
