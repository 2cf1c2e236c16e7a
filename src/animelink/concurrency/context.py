"""Execution contexts used to deliver promise completions.

A context decides *where* a terminal callback runs. Every registration in
:mod:`animelink.concurrency.promise` takes one explicitly, so there is no
hidden hop to a "main" thread anywhere in the pipeline.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import Executor
from typing import Any, Callable, Protocol, runtime_checkable

__all__ = [
    "ExecutionContext",
    "ExecutorContext",
    "INLINE",
    "InlineContext",
    "LoopContext",
]


@runtime_checkable
class ExecutionContext(Protocol):
    """Something that can run a callback somewhere, without blocking."""

    def dispatch(self, callback: Callable[..., Any], *args: Any) -> None:
        """Schedule ``callback(*args)`` to run on this context."""
        ...


class InlineContext:
    """Run the callback immediately on whatever context completed the step."""

    def dispatch(self, callback: Callable[..., Any], *args: Any) -> None:
        callback(*args)

    def __repr__(self) -> str:
        return "InlineContext()"


class LoopContext:
    """Deliver on a specific event loop, safe to use from any thread.

    This is the UI-affine option: a front end that owns a loop passes it here
    and every completion lands on that loop in the order it was scheduled.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self.loop = loop

    def dispatch(self, callback: Callable[..., Any], *args: Any) -> None:
        self.loop.call_soon_threadsafe(callback, *args)

    def __repr__(self) -> str:
        return f"LoopContext({self.loop!r})"


class ExecutorContext:
    """Deliver on a worker of a :class:`concurrent.futures.Executor`."""

    def __init__(self, executor: Executor) -> None:
        self.executor = executor

    def dispatch(self, callback: Callable[..., Any], *args: Any) -> None:
        self.executor.submit(callback, *args)

    def __repr__(self) -> str:
        return f"ExecutorContext({self.executor!r})"


INLINE = InlineContext()
