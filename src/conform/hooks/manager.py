"""Best-effort dispatch of execution callbacks."""

from __future__ import annotations

import inspect
import logging
from typing import Any

from conform.errors.types import CallbackFailed
from conform.types.hooks import ExecuteCallbacks, HookEvent

logger = logging.getLogger(__name__)


class HookDispatcher:
    """Invokes the callbacks registered for one execution.

    Each callback runs inline at its transition.  Failures are logged,
    recorded as :class:`CallbackFailed` and otherwise ignored.
    """

    def __init__(self, callbacks: ExecuteCallbacks | None = None) -> None:
        self._callbacks = callbacks
        self._errors: list[CallbackFailed] = []

    @property
    def errors(self) -> tuple[CallbackFailed, ...]:
        """Callback failures collected so far."""
        return tuple(self._errors)

    async def fire(self, event: HookEvent, *args: Any) -> None:
        """Invoke the callback for *event*, if one is registered."""
        if self._callbacks is None:
            return
        fn = getattr(self._callbacks, event.value)
        if fn is None:
            return
        try:
            result = fn(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.warning("Callback %s failed: %s: %s", event.value, type(exc).__name__, exc)
            self._errors.append(
                CallbackFailed(callback=event.value, message=f"{type(exc).__name__}: {exc}")
            )
