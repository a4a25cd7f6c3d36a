"""A sample-dispensing helper tool written against a capability protocol.

The tool only assumes the run state can expose and replace a
:class:`SamplerState`; any run-state type implementing
:class:`HasSamplerState` can host it next to unrelated helper tools.
Producing the sample pool (chunking, embedding, diversity selection) is left
to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from conform.errors.result import Err, Ok, Result
from conform.tools.base import helper_tool
from conform.types.agents import AgentState
from conform.types.tools import ReducerOutput

DEFAULT_SAMPLE_COUNT = 10


@dataclass(frozen=True, slots=True)
class SamplerState:
    """A fixed pool of samples and the indices already handed out."""

    samples: tuple[str, ...]
    provided: frozenset[int] = frozenset()

    @property
    def remaining(self) -> int:
        return len(self.samples) - len(self.provided)

    def take(self, count: int) -> tuple[SamplerState, tuple[str, ...]]:
        """Return the next *count* unprovided samples, in pool order."""
        picked = [i for i in range(len(self.samples)) if i not in self.provided][:count]
        new_state = replace(self, provided=self.provided | frozenset(picked))
        return new_state, tuple(self.samples[i] for i in picked)


@runtime_checkable
class HasSamplerState(Protocol):
    """Capability required of a run state that hosts the sampler tool."""

    @property
    def sampler(self) -> SamplerState | None:
        ...

    def with_sampler(self, sampler: SamplerState) -> Any:
        """Return a copy of this run state holding *sampler*."""
        ...


class RequestMoreSamplesInput(BaseModel):
    count: int = Field(
        default=DEFAULT_SAMPLE_COUNT,
        ge=1,
        description="How many additional samples to return",
    )


@helper_tool(
    name="request_more_samples",
    description=(
        "Request additional samples from the source material when the ones "
        "already provided are not enough to produce a good answer."
    ),
    input_model=RequestMoreSamplesInput,
)
def request_more_samples(
    state: AgentState[HasSamplerState, Any],
    args: RequestMoreSamplesInput,
) -> Result[ReducerOutput, str]:
    run = state.run
    if not isinstance(run, HasSamplerState) or run.sampler is None:
        return Err("Sampler state is not available for this agent")

    sampler, samples = run.sampler.take(args.count)
    new_state = replace(state, run=run.with_sampler(sampler))
    return Ok(ReducerOutput(
        new_state=new_state,
        tool_result={"samples": list(samples), "remaining": sampler.remaining},
    ))
