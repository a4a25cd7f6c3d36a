"""OpenTelemetry-based observability for conform."""

from conform.observability.metrics import (
    record_attempt,
    record_cost,
    record_latency,
    record_tokens,
    record_tool_call,
    record_validation_failure,
    reset_instruments,
)
from conform.observability.tracing import get_tracer, span

__all__ = [
    "get_tracer",
    "record_attempt",
    "record_cost",
    "record_latency",
    "record_tokens",
    "record_tool_call",
    "record_validation_failure",
    "reset_instruments",
    "span",
]
