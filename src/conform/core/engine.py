"""Public API: execute() — run an agent definition against one input."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import replace
from typing import Any

from conform.core.loop import ExecutionLoop
from conform.errors.codes import AGENT_CONSTRAINTS
from conform.errors.result import Err, Ok, Result
from conform.errors.types import InvalidMaxAttempts
from conform.hooks.manager import HookDispatcher
from conform.observability.metrics import record_cost, record_latency, record_tokens
from conform.observability.tracing import span
from conform.providers.registry import estimate_cost
from conform.types.agents import AgentDefinition
from conform.types.execution import ExecuteFailure, ExecuteMetadata, ExecuteSuccess, TokenUsage
from conform.types.hooks import ExecuteCallbacks, HookEvent
from conform.types.providers import ModelProvider

logger = logging.getLogger(__name__)


def _build_metadata(
    definition: AgentDefinition,
    loop: ExecutionLoop,
    latency_ms: float,
    hooks: HookDispatcher,
) -> ExecuteMetadata:
    flags = definition.observability
    usage = loop.usage
    return ExecuteMetadata(
        attempts=loop.attempts if flags.track_attempts else None,
        latency_ms=latency_ms if flags.track_latency else None,
        tokens=(
            TokenUsage(input_tokens=usage.input_tokens, output_tokens=usage.output_tokens)
            if flags.track_tokens
            else None
        ),
        cost=estimate_cost(definition.model.name, usage) if flags.track_cost else None,
        callback_errors=hooks.errors,
    )


async def execute(
    definition: AgentDefinition,
    *,
    input: Any,
    provider: ModelProvider,
    initial_state: Any = None,
    callbacks: ExecuteCallbacks | None = None,
    signal: asyncio.Event | None = None,
    max_attempts: int | None = None,
) -> Result[ExecuteSuccess, ExecuteFailure]:
    """Drive *definition* to a validated output for *input*.

    Usage::

        result = await conform.execute(definition, input=doc, provider=provider)
        match result:
            case Ok(value=success):
                use(success.output)
            case Err(error=failure):
                print(format_agent_errors(failure.errors))

    Parameters
    ----------
    initial_state:
        Run state to start from instead of ``definition.initial_run_state(input)``.
    callbacks:
        Observability callbacks; their failures never change the outcome.
    signal:
        Set it to cancel.  Timeouts are built on this too, e.g.
        ``loop.call_later(30, signal.set)``.
    max_attempts:
        Overrides the definition's attempt budget for this call only.
    """
    hooks = HookDispatcher(callbacks)

    if max_attempts is not None and (
        isinstance(max_attempts, bool)
        or not isinstance(max_attempts, int)
        or max_attempts < AGENT_CONSTRAINTS.min_max_attempts
    ):
        return Err(ExecuteFailure(
            errors=(
                InvalidMaxAttempts(
                    value=max_attempts,
                    minimum=AGENT_CONSTRAINTS.min_max_attempts,
                    path="max_attempts",
                ),
            ),
            run=initial_state,
        ))

    loop = ExecutionLoop(definition, provider, hooks, signal=signal, max_attempts=max_attempts)
    start = time.monotonic()
    with span("conform.execute", {"agent": definition.name, "model": definition.model.name}) as s:
        result = await loop.run(input, initial_state)
        s.set_attribute("conform.attempts", loop.attempts)
        s.set_attribute("conform.success", isinstance(result, Ok))
    latency_ms = (time.monotonic() - start) * 1000

    record_latency(latency_ms, agent=definition.name)
    record_tokens(loop.usage.input_tokens, loop.usage.output_tokens, model=definition.model.name)
    metadata = _build_metadata(definition, loop, latency_ms, hooks)
    if metadata.cost is not None:
        record_cost(metadata.cost, model=definition.model.name)

    match result:
        case Ok(value=success):
            logger.info("%s succeeded after %d attempt(s)", definition.name, success.attempts)
            await hooks.fire(HookEvent.SUCCESS, success.output, metadata)
            metadata = replace(metadata, callback_errors=hooks.errors)
            return Ok(replace(success, metadata=metadata))
        case Err(error=failure):
            logger.info(
                "%s failed: %s", definition.name, ", ".join(e.code.value for e in failure.errors),
            )
            await hooks.fire(HookEvent.FAILURE, failure.errors, metadata)
            metadata = replace(metadata, callback_errors=hooks.errors)
            return Err(replace(failure, metadata=metadata))
    raise AssertionError(f"unexpected loop result {result!r}")  # pragma: no cover
