"""Helpers shared by helper tools and the engine's tool dispatch."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from conform.types.agents import AgentDefinition
from conform.types.providers import ToolSpec
from conform.types.tools import HelperTool, ToolReducer

SUBMIT_TOOL_NAME = "submit"

SUBMIT_TOOL = ToolSpec(
    name=SUBMIT_TOOL_NAME,
    description=(
        "Submit your final output for validation. "
        "Call this when you are satisfied with your output."
    ),
    input_schema={"type": "object", "properties": {}, "required": []},
)


def helper_tool(
    name: str,
    description: str,
    input_model: type[BaseModel],
) -> Callable[[ToolReducer], HelperTool]:
    """Decorator turning a reducer function into a :class:`HelperTool`."""

    def wrap(reducer: ToolReducer) -> HelperTool:
        return HelperTool(
            name=name,
            description=description,
            input_model=input_model,
            reducer=reducer,
        )

    return wrap


def tool_specs(definition: AgentDefinition) -> tuple[ToolSpec, ...]:
    """Tools advertised to the model.

    The output tool comes first, then helpers, then ``submit`` when the
    output tool has a reflection handler.
    """
    output = definition.tools.output
    specs = [
        ToolSpec(
            name=output.name,
            description=output.description,
            input_schema=definition.output_model.model_json_schema(),
        )
    ]
    for tool in definition.tools.helpers.values():
        specs.append(
            ToolSpec(name=tool.name, description=tool.description, input_schema=tool.input_schema())
        )
    if output.reflects:
        specs.append(SUBMIT_TOOL)
    return tuple(specs)


def render_tool_result(value: Any) -> str:
    """Serialise a reducer's tool result for the model."""
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return json.dumps(value, default=str)
