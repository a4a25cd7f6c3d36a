"""Cooperative cancellation via a caller-supplied ``asyncio.Event``."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class ExecutionAborted(Exception):
    """Raised internally when the caller's signal fires; never escapes ``execute``."""

    def __init__(self, phase: str) -> None:
        super().__init__(f"execution aborted during {phase} phase")
        self.phase = phase


def check_signal(signal: asyncio.Event | None, phase: str) -> None:
    """Raise :class:`ExecutionAborted` if *signal* is already set."""
    if signal is not None and signal.is_set():
        raise ExecutionAborted(phase)


async def race(awaitable: Awaitable[T], signal: asyncio.Event | None, phase: str) -> T:
    """Await *awaitable* unless *signal* fires first.

    When the signal wins, the in-flight task is cancelled and its result (if
    any) discarded, then :class:`ExecutionAborted` is raised.
    """
    if signal is None:
        return await awaitable
    if signal.is_set():
        # Close an unstarted coroutine so it does not warn about never being awaited.
        close = getattr(awaitable, "close", None)
        if close is not None:
            close()
        raise ExecutionAborted(phase)

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if waiter in done or signal.is_set():
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise ExecutionAborted(phase)
    return task.result()
