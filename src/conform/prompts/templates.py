"""Jinja2 prompt templates and resolution of prompt sources into builders."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import jinja2

from conform.types.agents import ExecutionContext, PromptSource

_ENV = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    autoescape=False,
    keep_trailing_newline=True,
)

ResolvedPrompt = Callable[[Any, ExecutionContext], Awaitable[str]]


class PromptKind(Enum):
    SYSTEM = "system"
    USER = "user"
    ERROR = "error"


class PromptResolutionError(Exception):
    """A prompt source could not be turned into a builder."""

    def __init__(self, kind: PromptKind, reason: str) -> None:
        super().__init__(f"Cannot resolve {kind.value} prompt: {reason}")
        self.kind = kind
        self.reason = reason


@dataclass(frozen=True, slots=True)
class PromptTemplate:
    """A Jinja2 template given inline (``source``) or as a file (``path``).

    Templates render with ``input`` and ``context``; the error prompt gets the
    formatted validation error as ``error`` (and as ``input``).
    """

    source: str | None = None
    path: str | Path | None = None

    def load(self) -> jinja2.Template:
        """Read and compile the template; raises ``OSError`` or ``TemplateError``."""
        if (self.source is None) == (self.path is None):
            raise ValueError("exactly one of source or path must be given")
        text = self.source if self.source is not None else Path(self.path).read_text()
        return _ENV.from_string(text)


def _template_builder(template: jinja2.Template, kind: PromptKind) -> ResolvedPrompt:
    async def render(arg: Any, context: ExecutionContext) -> str:
        if kind is PromptKind.ERROR:
            return template.render(error=arg, input=arg, context=context)
        return template.render(input=arg, context=context)

    return render


def _callable_builder(fn: Callable[..., Any]) -> ResolvedPrompt:
    async def call(arg: Any, context: ExecutionContext) -> str:
        result = fn(arg, context)
        if inspect.isawaitable(result):
            result = await result
        return result

    return call


def resolve_prompt(source: PromptSource, kind: PromptKind) -> ResolvedPrompt:
    """Turn a prompt source into an async ``(arg, context) -> str`` builder.

    Templates are loaded and compiled here, so a missing file or a syntax
    error surfaces immediately as :class:`PromptResolutionError`.
    """
    if isinstance(source, str):
        source = PromptTemplate(source=source)
    if isinstance(source, PromptTemplate):
        try:
            template = source.load()
        except (OSError, ValueError, jinja2.TemplateError) as exc:
            raise PromptResolutionError(kind, str(exc)) from exc
        return _template_builder(template, kind)
    if callable(source):
        return _callable_builder(source)
    raise PromptResolutionError(kind, f"unsupported prompt source {type(source).__name__}")
