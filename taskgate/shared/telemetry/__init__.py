"""Shared telemetry: logging setup and tracing helpers."""

from taskgate.shared.telemetry.logging import get_logger, setup_logging
from taskgate.shared.telemetry.tracing import (
    add_span_attributes,
    add_span_event,
    set_span_error,
    traced,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "traced",
    "add_span_attributes",
    "add_span_event",
    "set_span_error",
]
