"""The attempt/validation state machine.

One :class:`ExecutionLoop` drives a single execution: it prompts the model,
dispatches helper tool calls to their reducers, validates submitted output
(or, in reflection mode, the last draft before ``submit``) and retries
with corrective feedback until the output validates or a budget runs out.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from dataclasses import dataclass, replace
from typing import Any

from conform.core.cancellation import ExecutionAborted, check_signal, race
from conform.errors.result import Err, Ok, Result
from conform.errors.types import (
    AgentError,
    ApiError,
    ExecutionCancelled,
    InvalidResponse,
    MaxAttemptsExceeded,
    MaxIterationsExceeded,
    OutputToolNotUsed,
    RateLimitExceeded,
    SubmitBeforeOutput,
    TokenLimitExceeded,
)
from conform.hooks.manager import HookDispatcher
from conform.observability.metrics import (
    record_attempt,
    record_tool_call,
    record_validation_failure,
)
from conform.prompts.build import (
    build_error_prompt,
    build_system_prompt,
    build_user_prompt,
    format_feedback,
)
from conform.providers.errors import InvalidResponseError, RateLimitError, TokenLimitError
from conform.tools.base import SUBMIT_TOOL_NAME, render_tool_result, tool_specs
from conform.types.agents import AgentDefinition, AgentState, ExecutionContext
from conform.types.execution import ExecuteFailure, ExecuteSuccess
from conform.types.hooks import HookEvent
from conform.types.providers import (
    ChatMessage,
    ModelProvider,
    ModelRequest,
    ModelResponse,
    ProviderUsage,
    ToolCall,
)
from conform.types.tools import ReducerOutput, ToolOutcome
from conform.types.validation import Invalid, Valid
from conform.validation.layers import validate_layers

logger = logging.getLogger(__name__)

OUTPUT_REJECTED = "Output did not pass validation; see the feedback that follows."
TOOL_SKIPPED = "Not executed: output was submitted in the same turn."


@dataclass(frozen=True, slots=True)
class _Submission:
    """A candidate output and the turn that produced it."""

    output: Any
    state: AgentState
    assistant: ChatMessage
    # tool_result blocks owed to the assistant turn if the attempt is retried
    pending_results: tuple[dict[str, Any], ...]


def _model_error(exc: Exception) -> AgentError:
    match exc:
        case RateLimitError(retry_after=retry_after):
            return RateLimitExceeded(message=str(exc), retry_after=retry_after)
        case TokenLimitError(limit=limit):
            return TokenLimitExceeded(message=str(exc), limit=limit)
        case InvalidResponseError():
            return InvalidResponse(message=str(exc))
    return ApiError(
        message=str(exc) or type(exc).__name__,
        status_code=getattr(exc, "status_code", None),
    )


class ExecutionLoop:
    """Runs one execution of an agent definition.

    Not reusable: construct a new loop per execution.  The definition is only
    read, so any number of loops may share it concurrently.
    """

    def __init__(
        self,
        definition: AgentDefinition,
        provider: ModelProvider,
        hooks: HookDispatcher,
        *,
        signal: asyncio.Event | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self._definition = definition
        self._provider = provider
        self._hooks = hooks
        self._signal = signal
        self._max_attempts = max_attempts or definition.max_attempts
        self._max_iterations = definition.max_iterations
        self._tools = tool_specs(definition)
        self._history: list[ChatMessage] = []
        self._run: Any = None  # last committed run state
        self._attempt = 0
        self.usage = ProviderUsage()

    @property
    def attempts(self) -> int:
        """Number of attempts started so far."""
        return self._attempt

    @property
    def history(self) -> tuple[ChatMessage, ...]:
        return tuple(self._history)

    async def run(
        self, input: Any, initial_state: Any = None,
    ) -> Result[ExecuteSuccess, ExecuteFailure]:
        """Drive the execution to success or terminal failure."""
        try:
            return await self._run_attempts(input, initial_state)
        except ExecutionAborted as exc:
            logger.info(
                "Execution of %s cancelled during %s phase (attempt %d)",
                self._definition.name, exc.phase, self._attempt,
            )
            return self._fail([
                ExecutionCancelled(attempt=max(self._attempt, 1), phase=exc.phase)
            ])

    # ------------------------------------------------------------------
    # Attempts
    # ------------------------------------------------------------------

    async def _run_attempts(
        self, input: Any, initial_state: Any,
    ) -> Result[ExecuteSuccess, ExecuteFailure]:
        d = self._definition
        self._run = initial_state if initial_state is not None else d.initial_run_state(input)

        check_signal(self._signal, "prompt")
        built = await build_user_prompt(d, input, self._context(attempt=1))
        if isinstance(built, Err):
            return self._fail(built.error)
        self._history.append(ChatMessage(role="user", content=built.value))

        last_outcome: Invalid | None = None
        pending: tuple[dict[str, Any], ...] = ()

        for attempt in range(1, self._max_attempts + 1):
            self._attempt = attempt
            context = self._context(attempt=attempt)
            state = AgentState(
                context=context,
                run=self._run,
                attempt=d.initial_attempt_state(input, self._run, context),
            )
            logger.debug("Starting attempt %d/%d of %s", attempt, self._max_attempts, d.name)
            await self._hooks.fire(HookEvent.ATTEMPT_START, context)

            if last_outcome is not None:
                check_signal(self._signal, "prompt")
                built = format_feedback(d, last_outcome, context)
                if isinstance(built, Ok):
                    built = await build_error_prompt(d, built.value, context)
                if isinstance(built, Err):
                    await self._complete_attempt(context, success=False)
                    return self._fail(built.error, last_outcome)
                feedback = {"type": "text", "text": built.value}
                self._history.append(ChatMessage(role="user", content=(*pending, feedback)))

            check_signal(self._signal, "prompt")
            built = await build_system_prompt(d, input, context)
            if isinstance(built, Err):
                await self._complete_attempt(context, success=False)
                return self._fail(built.error, last_outcome)

            submitted = await self._iterate(built.value, state)
            if isinstance(submitted, Err):
                await self._complete_attempt(context, success=False)
                return self._fail(submitted.error, last_outcome)
            submission = submitted.value

            check_signal(self._signal, "validation")
            outcome = await validate_layers(
                submission.output,
                d.validation.validators,
                submission.state.context,
                self._hooks,
                self._signal,
            )
            if isinstance(outcome, Valid):
                await self._complete_attempt(context, success=True)
                return Ok(ExecuteSuccess(output=outcome.output, attempts=attempt, run=self._run))

            await self._complete_attempt(context, success=False)
            record_validation_failure(d.name, outcome.validator_name)
            logger.info(
                "Attempt %d/%d of %s rejected by %s: %s",
                attempt, self._max_attempts, d.name, outcome.validator_name, outcome.error,
            )
            last_outcome = outcome
            self._history.append(submission.assistant)
            pending = submission.pending_results

        assert last_outcome is not None
        return self._fail(
            [
                MaxAttemptsExceeded(
                    max_attempts=self._max_attempts,
                    last_error=f"{last_outcome.validator_name}: {last_outcome.error}",
                    last_outcome=last_outcome,
                )
            ],
            last_outcome,
        )

    async def _complete_attempt(self, context: ExecutionContext, *, success: bool) -> None:
        record_attempt(self._definition.name, success=success)
        await self._hooks.fire(HookEvent.ATTEMPT_COMPLETE, context, success)

    # ------------------------------------------------------------------
    # Iterations within an attempt
    # ------------------------------------------------------------------

    async def _iterate(
        self, system: str, state: AgentState,
    ) -> Result[_Submission, list[AgentError]]:
        """Call the model until it submits output, or fail."""
        d = self._definition
        output_name = d.tools.output.name
        reflects = d.tools.output.reflects
        draft: ToolCall | None = None  # latest output call, reflection mode only

        for iteration in range(1, self._max_iterations + 1):
            state = replace(state, context=replace(state.context, iteration=iteration))

            check_signal(self._signal, "model")
            request = ModelRequest(
                model=d.model.name,
                system=system,
                messages=tuple(self._history),
                tools=self._tools,
                temperature=d.model.temperature,
                max_tokens=d.model.max_tokens,
            )
            try:
                response = await race(
                    self._provider.invoke(request, self._signal), self._signal, "model",
                )
            except ExecutionAborted:
                raise
            except Exception as exc:
                logger.warning("Model call failed for %s: %s: %s", d.name, type(exc).__name__, exc)
                return Err([_model_error(exc)])

            self.usage.add(response.usage)
            assistant = self._assistant_message(response)

            if not response.tool_calls:
                return Err([OutputToolNotUsed(expected=output_name, response_text=response.text)])

            # Output submission wins over helper calls made in the same turn.
            output_call = None
            if not reflects:
                output_call = next((c for c in response.tool_calls if c.name == output_name), None)
            if output_call is not None:
                pending = tuple(
                    self._provider.format_tool_result(
                        c.id,
                        OUTPUT_REJECTED if c is output_call else TOOL_SKIPPED,
                        is_error=True,
                    )
                    for c in response.tool_calls
                )
                return Ok(_Submission(
                    output=output_call.input,
                    state=state,
                    assistant=assistant,
                    pending_results=pending,
                ))

            submit_call: ToolCall | None = None
            outcomes: list[tuple[ToolCall, ToolOutcome]] = []
            for call in response.tool_calls:
                if reflects and call.name == SUBMIT_TOOL_NAME:
                    submit_call = call
                elif call.name == output_name:
                    draft = call
                state, outcome = await self._dispatch(state, call)
                outcomes.append((call, outcome))
            self._run = state.run

            if submit_call is not None:
                if draft is None:
                    return Err([SubmitBeforeOutput(attempt=state.context.attempt, iteration=iteration)])
                pending = tuple(
                    self._provider.format_tool_result(
                        c.id,
                        OUTPUT_REJECTED if c is submit_call else o.content,
                        is_error=o.is_error or c is submit_call,
                    )
                    for c, o in outcomes
                )
                return Ok(_Submission(
                    output=draft.input,
                    state=state,
                    assistant=assistant,
                    pending_results=pending,
                ))

            self._history.append(assistant)
            self._history.append(ChatMessage(
                role="user",
                content=tuple(
                    self._provider.format_tool_result(c.id, o.content, is_error=o.is_error)
                    for c, o in outcomes
                ),
            ))

        return Err([
            MaxIterationsExceeded(
                iterations=self._max_iterations,
                max_iterations=self._max_iterations,
                attempt=state.context.attempt,
            )
        ])

    async def _dispatch(self, state: AgentState, call: ToolCall) -> tuple[AgentState, ToolOutcome]:
        context = state.context
        output = self._definition.tools.output
        await self._hooks.fire(HookEvent.TOOL_CALL, context, call.name, call.input)
        if output.reflects and call.name == SUBMIT_TOOL_NAME:
            new_state, outcome = state, ToolOutcome(content="")
        elif call.name == output.name:
            new_state, outcome = state, self._preview(call)
        else:
            new_state, outcome = self._reduce(state, call)
        record_tool_call(call.name, is_error=outcome.is_error)
        await self._hooks.fire(HookEvent.TOOL_RESULT, context, call.name, outcome)
        return new_state, outcome

    def _preview(self, call: ToolCall) -> ToolOutcome:
        """Answer a draft output with the reflection handler's preview."""
        handler = self._definition.tools.output.reflection_handler
        assert handler is not None
        try:
            result = handler(copy.deepcopy(call.input))
        except Exception as exc:
            logger.warning("Reflection handler for %s raised %s: %s", call.name, type(exc).__name__, exc)
            return ToolOutcome(content=f"Error: {exc}", is_error=True)

        match result:
            case Ok(value=str() as preview):
                return ToolOutcome(content=preview)
            case Err(error=message):
                return ToolOutcome(content=str(message), is_error=True)
        logger.warning("Reflection handler for %s returned %r", call.name, result)
        return ToolOutcome(
            content=f"Error: reflection for {call.name} produced an invalid result", is_error=True,
        )

    def _reduce(self, state: AgentState, call: ToolCall) -> tuple[AgentState, ToolOutcome]:
        """Apply one helper call; failures leave *state* untouched."""
        tool = self._definition.tools.helpers.get(call.name)
        if tool is None:
            return state, ToolOutcome(content=f"Unknown tool: {call.name}", is_error=True)

        try:
            result = tool.reduce(state, call.input)
        except Exception as exc:
            logger.warning("Reducer for %s raised %s: %s", call.name, type(exc).__name__, exc)
            return state, ToolOutcome(content=f"Error: {exc}", is_error=True)

        match result:
            case Err(error=message):
                return state, ToolOutcome(content=f"Error: {message}", is_error=True)
            case Ok(value=ReducerOutput(new_state=AgentState() as new_state, tool_result=value)):
                # The engine owns the context; reducers cannot move it.
                return replace(new_state, context=state.context), ToolOutcome(
                    content=render_tool_result(value)
                )
        logger.warning("Reducer for %s returned %r", call.name, result)
        return state, ToolOutcome(
            content=f"Error: tool {call.name} produced an invalid result", is_error=True,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _context(self, attempt: int, iteration: int = 1) -> ExecutionContext:
        return ExecutionContext(
            attempt=attempt,
            max_attempts=self._max_attempts,
            iteration=iteration,
            max_iterations=self._max_iterations,
        )

    def _assistant_message(self, response: ModelResponse) -> ChatMessage:
        blocks: list[dict[str, Any]] = []
        if response.text:
            blocks.append({"type": "text", "text": response.text})
        for call in response.tool_calls:
            blocks.append(self._provider.format_tool_use(call.id, call.name, call.input))
        return ChatMessage(role="assistant", content=tuple(blocks))

    def _fail(
        self, errors: list[AgentError], last_outcome: Invalid | None = None,
    ) -> Err[ExecuteFailure]:
        return Err(ExecuteFailure(errors=tuple(errors), run=self._run, last_outcome=last_outcome))
