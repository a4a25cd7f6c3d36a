"""Observability callback types."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class HookEvent(Enum):
    """State transitions that can trigger a callback.

    Values match the attribute names on :class:`ExecuteCallbacks`.
    """

    ATTEMPT_START = "on_attempt_start"
    ATTEMPT_COMPLETE = "on_attempt_complete"
    VALIDATION_LAYER_START = "on_validation_layer_start"
    VALIDATION_LAYER_COMPLETE = "on_validation_layer_complete"
    TOOL_CALL = "on_tool_call"
    TOOL_RESULT = "on_tool_result"
    SUCCESS = "on_success"
    FAILURE = "on_failure"


@dataclass(frozen=True, slots=True)
class ExecuteCallbacks:
    """Optional callbacks invoked at execution state transitions.

    Callbacks may be plain functions or coroutine functions.  A callback that
    raises is logged and ignored; it never changes the execution's outcome.
    """

    on_attempt_start: Callable[..., Any] | None = None  # (context)
    on_attempt_complete: Callable[..., Any] | None = None  # (context, success)
    on_validation_layer_start: Callable[..., Any] | None = None  # (context, LayerInfo)
    on_validation_layer_complete: Callable[..., Any] | None = None  # (context, LayerResult)
    on_tool_call: Callable[..., Any] | None = None  # (context, name, input)
    on_tool_result: Callable[..., Any] | None = None  # (context, name, ToolOutcome)
    on_success: Callable[..., Any] | None = None  # (output, metadata)
    on_failure: Callable[..., Any] | None = None  # (errors, metadata)
