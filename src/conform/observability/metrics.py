"""Metrics recording through the OpenTelemetry API.

Instruments are no-ops until the host application installs an SDK meter
provider.
"""

from __future__ import annotations

from typing import Any

from opentelemetry import metrics

# Lazily-created instruments
_meter: Any = None
_attempt_counter: Any = None
_validation_failure_counter: Any = None
_tool_call_counter: Any = None
_token_counter: Any = None
_cost_counter: Any = None
_latency_histogram: Any = None


def _ensure_instruments() -> None:
    """Create meter and instruments on first use."""
    global _meter, _attempt_counter, _validation_failure_counter, _tool_call_counter
    global _token_counter, _cost_counter, _latency_histogram

    if _meter is not None:
        return

    _meter = metrics.get_meter("conform")
    _attempt_counter = _meter.create_counter(
        "conform.attempts",
        description="Output-submission attempts",
    )
    _validation_failure_counter = _meter.create_counter(
        "conform.validation_failures",
        description="Candidate outputs rejected by a validation layer",
    )
    _tool_call_counter = _meter.create_counter(
        "conform.tool_calls",
        description="Helper tool calls dispatched",
    )
    _token_counter = _meter.create_counter(
        "conform.tokens",
        description="Total tokens consumed",
        unit="tokens",
    )
    _cost_counter = _meter.create_counter(
        "conform.cost",
        description="Total cost in USD",
        unit="USD",
    )
    _latency_histogram = _meter.create_histogram(
        "conform.execution_latency",
        description="Wall-clock time of one execution",
        unit="ms",
    )


def record_attempt(agent: str, *, success: bool) -> None:
    """Record a completed attempt."""
    _ensure_instruments()
    _attempt_counter.add(1, {"agent": agent, "success": str(success).lower()})


def record_validation_failure(agent: str, validator: str) -> None:
    _ensure_instruments()
    _validation_failure_counter.add(1, {"agent": agent, "validator": validator})


def record_tool_call(tool_name: str, *, is_error: bool = False) -> None:
    """Record a helper tool dispatch."""
    _ensure_instruments()
    _tool_call_counter.add(1, {"tool": tool_name, "error": str(is_error).lower()})


def record_tokens(input_tokens: int = 0, output_tokens: int = 0, *, model: str = "") -> None:
    """Record token usage."""
    _ensure_instruments()
    _token_counter.add(input_tokens, {"direction": "input", "model": model})
    _token_counter.add(output_tokens, {"direction": "output", "model": model})


def record_cost(cost: float, *, model: str = "") -> None:
    _ensure_instruments()
    _cost_counter.add(cost, {"model": model})


def record_latency(latency_ms: float, *, agent: str = "") -> None:
    """Record execution latency in milliseconds."""
    _ensure_instruments()
    _latency_histogram.record(latency_ms, {"agent": agent})


def reset_instruments() -> None:
    """Reset module-level instruments; useful for test isolation."""
    global _meter, _attempt_counter, _validation_failure_counter, _tool_call_counter
    global _token_counter, _cost_counter, _latency_histogram
    _meter = None
    _attempt_counter = None
    _validation_failure_counter = None
    _tool_call_counter = None
    _token_counter = None
    _cost_counter = None
    _latency_histogram = None
