"""Tool descriptors and the reducer protocol."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from conform.errors.result import Err, Result
from conform.types.agents import AgentState

S = TypeVar("S", bound=AgentState)


@dataclass(frozen=True, slots=True)
class ReducerOutput(Generic[S]):
    """What a reducer produces: the replacement state and the tool's reply."""

    new_state: S
    tool_result: Any


# (state, validated input) -> Ok(ReducerOutput) | Err(message)
ToolReducer = Callable[[AgentState, Any], Result[ReducerOutput, str]]


# (proposed output) -> Ok(preview for the model) | Err(message)
ReflectionHandler = Callable[[Any], Result[str, str]]


@dataclass(frozen=True, slots=True)
class OutputTool:
    """The tool the model calls to submit its final answer.

    With a ``reflection_handler`` the output tool becomes a draft: each call
    is answered with the handler's preview, and the model finishes the
    attempt by calling the separate ``submit`` tool.  The last draft before
    ``submit`` is what gets validated.
    """

    name: str
    description: str
    reflection_handler: ReflectionHandler | None = None

    @property
    def reflects(self) -> bool:
        return self.reflection_handler is not None


@dataclass(frozen=True, slots=True)
class HelperTool:
    """A model-callable tool whose effect is a pure state transition.

    ``input_model`` describes the arguments the model must supply.  The
    reducer only ever sees input that already passed it.
    """

    name: str
    description: str
    input_model: type[BaseModel]
    reducer: ToolReducer

    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema()

    def reduce(self, state: AgentState, raw_input: Any) -> Result[ReducerOutput, str]:
        """Validate *raw_input*, then hand it to the reducer."""
        try:
            parsed = self.input_model.model_validate(raw_input)
        except ValidationError as exc:
            return Err(f"Invalid input for {self.name}: {_summarize(exc)}")
        return self.reducer(state, parsed)


@dataclass(frozen=True, slots=True)
class ToolOutcome:
    """The rendered reply sent back to the model for one helper call."""

    content: str
    is_error: bool = False


def _summarize(exc: ValidationError) -> str:
    parts = []
    for issue in exc.errors():
        loc = ".".join(str(p) for p in issue["loc"])
        parts.append(f"{loc}: {issue['msg']}" if loc else issue["msg"])
    return "; ".join(parts)
