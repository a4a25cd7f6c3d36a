"""Tracer access and a span context manager."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace


def get_tracer(name: str = "conform") -> trace.Tracer:
    return trace.get_tracer(name)


@contextmanager
def span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """Context manager that runs the block inside an OTel span."""
    with get_tracer().start_as_current_span(name, attributes=attributes) as s:
        yield s
