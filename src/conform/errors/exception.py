"""Exception wrapper for callers that prefer raising over inspecting results."""

from __future__ import annotations

from collections.abc import Iterable

from conform.errors.formatter import format_agent_errors
from conform.errors.types import AgentError


class AgentProcessingError(Exception):
    """Raised at an application boundary with the errors that caused it."""

    def __init__(self, errors: Iterable[AgentError]) -> None:
        self.errors: tuple[AgentError, ...] = tuple(errors)
        super().__init__(format_agent_errors(self.errors))

    @property
    def codes(self) -> list[str]:
        return [e.code.value for e in self.errors]
