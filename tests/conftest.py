"""Test fixtures including MockProvider for deterministic testing."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest
from pydantic import BaseModel

from conform.core.config import EngineSettings
from conform.types.agents import (
    AgentConfig,
    ModelConfig,
    ObservabilityConfig,
    PromptsConfig,
    ToolsConfig,
    ValidationConfig,
)
from conform.types.providers import ModelRequest, ModelResponse, ProviderUsage, ToolCall
from conform.types.tools import OutputTool
from conform.validation.validators import SchemaValidator

OUTPUT_TOOL = "submit_answer"


@dataclass
class MockTurn:
    """A scripted turn for MockProvider.

    Specify text and/or tool_uses for what the model should "respond" with.
    ``hang=True`` makes the call block until cancelled; ``error`` is raised
    instead of responding.
    """

    text: str = ""
    tool_uses: list[dict[str, Any]] = field(default_factory=list)
    # Each tool_use: {"id": "tu1", "name": "submit_answer", "args": {"x": 1}}
    hang: bool = False
    error: Exception | None = None


def submit(args: dict[str, Any], tool_id: str = "out1") -> MockTurn:
    """A turn that submits *args* through the output tool."""
    return MockTurn(tool_uses=[{"id": tool_id, "name": OUTPUT_TOOL, "args": args}])


class MockProvider:
    """A deterministic mock provider for testing.

    Usage:
        provider = MockProvider(turns=[
            MockTurn(tool_uses=[{"id": "tu1", "name": "add_one", "args": {"n": 1}}]),
            submit({"x": 1}),
        ])
    """

    def __init__(self, turns: list[MockTurn]) -> None:
        self._turns = list(turns)
        self._turn_index = 0
        self.requests: list[ModelRequest] = []
        self.cancelled = False

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def invoke(self, request: ModelRequest, signal: asyncio.Event | None = None) -> ModelResponse:
        self.requests.append(request)
        if self._turn_index >= len(self._turns):
            return ModelResponse(text="(no more scripted turns)", usage=ProviderUsage(10, 5))

        turn = self._turns[self._turn_index]
        self._turn_index += 1

        if turn.error is not None:
            raise turn.error
        if turn.hang:
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                self.cancelled = True
                raise

        calls = tuple(
            ToolCall(id=tu["id"], name=tu["name"], input=tu.get("args", {}))
            for tu in turn.tool_uses
        )
        return ModelResponse(
            text=turn.text,
            tool_calls=calls,
            stop_reason="tool_use" if calls else "end_turn",
            usage=ProviderUsage(input_tokens=100, output_tokens=50),
        )

    def format_tool_result(
        self, tool_use_id: str, content: str, is_error: bool = False,
    ) -> dict[str, Any]:
        block: dict[str, Any] = {
            "type": "tool_result",
            "tool_use_id": tool_use_id,
            "content": content,
        }
        if is_error:
            block["is_error"] = True
        return block

    def format_tool_use(self, tool_use_id: str, name: str, args: dict[str, Any]) -> dict[str, Any]:
        return {"type": "tool_use", "id": tool_use_id, "name": name, "input": args}


class Answer(BaseModel):
    x: float


def make_config(**overrides: Any) -> AgentConfig:
    """A valid AgentConfig for an agent whose output is ``{"x": number}``."""
    config = AgentConfig(
        name="answerer",
        description="Answers with a number",
        model=ModelConfig(provider="anthropic", name="claude-sonnet-4-6", temperature=0.2, max_tokens=1024),
        prompts=PromptsConfig(
            system="You answer with a number.",
            user="Question: {{ input.question }}",
            error="Fix this:\n{{ error }}",
        ),
        tools=ToolsConfig(output=OutputTool(name=OUTPUT_TOOL, description="Submit the final answer")),
        validation=ValidationConfig(validators=[SchemaValidator(Answer)], max_attempts=3, max_iterations=5),
        observability=ObservabilityConfig(track_cost=True),
    )
    for key, value in overrides.items():
        setattr(config, key, value)
    return config


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(default_max_iterations=7)


@pytest.fixture
def config() -> AgentConfig:
    return make_config()
