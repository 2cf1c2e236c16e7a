"""Lazy, composable promises on top of asyncio.

A :class:`Promise` wraps a coroutine factory. Nothing runs until the promise
is awaited or started, so chains can be built up front and handed around
freely. Composition never blocks: ``then`` registers a continuation,
``queue`` fans out and joins, and ``start`` schedules the whole chain on an
event loop and returns an :class:`~animelink.concurrency.task.AsyncTask`.

Failure handling follows one rule: any exception raised by a step becomes
the failure of the chain and skips every later ``then``. There is no retry at
this layer; callers that want one can build it with :meth:`Promise.recover`.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Sequence,
    TypeVar,
    Union,
)

from animelink.concurrency.context import INLINE, ExecutionContext
from animelink.concurrency.task import AsyncTask

__all__ = ["Promise"]

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

Step = Union[U, Awaitable[U], "Promise[U]"]


async def _settle(result: Any) -> Any:
    """Reduce a step's return value (plain, awaitable or Promise) to a value."""
    if isinstance(result, Promise):
        return await result.run()
    if inspect.isawaitable(result):
        return await result
    return result


class Promise(Generic[T]):
    """A value that becomes available after one or more asynchronous steps."""

    def __init__(
        self, factory: Callable[[], Awaitable[T]], *, label: str | None = None
    ) -> None:
        """Create a promise from a zero-argument coroutine factory.

        Args:
            factory: Called once per run to produce the awaitable doing the work.
            label: Human readable name used in logs and task owners.
        """
        self._factory = factory
        self.label = label or getattr(factory, "__qualname__", "promise")

    def __repr__(self) -> str:
        return f"Promise({self.label!r})"

    def __await__(self) -> Any:
        return self.run().__await__()

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def firstly(
        cls, fn: Callable[[], Step[T]], *, label: str | None = None
    ) -> Promise[T]:
        """Start a chain from a callable returning a value, awaitable or Promise."""

        async def first() -> T:
            return await _settle(fn())

        return cls(first, label=label or getattr(fn, "__qualname__", None))

    @classmethod
    def resolved(cls, value: T) -> Promise[T]:
        """Return a promise that succeeds with *value*."""

        async def done() -> T:
            return value

        return cls(done, label="resolved")

    @classmethod
    def rejected(cls, error: BaseException) -> Promise[Any]:
        """Return a promise that fails with *error*."""

        async def failed() -> Any:
            raise error

        return cls(failed, label="rejected")

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------
    async def run(self) -> T:
        """Run the chain in the calling task and return its value."""
        return await self._factory()

    def then(self, transform: Callable[[T], Step[U]]) -> Promise[U]:
        """Register *transform* on the eventual success value.

        The transform may return a plain value, an awaitable or another
        Promise; in the last two cases the chain suspends until it settles.
        A raised exception fails the resulting promise.
        """

        async def chained() -> U:
            value = await self.run()
            return await _settle(transform(value))

        return Promise(chained, label=self.label)

    def recover(self, handler: Callable[[Exception], Step[T]]) -> Promise[T]:
        """Turn a failure into a value (or another chain) via *handler*.

        Cancellation is never recovered.
        """

        async def recovered() -> T:
            try:
                return await self.run()
            except Exception as exc:  # noqa: BLE001
                return await _settle(handler(exc))

        return Promise(recovered, label=self.label)

    @staticmethod
    def queue(promises: Sequence[Promise[T]]) -> Promise[list[T]]:
        """Fan out over *promises* and join their results.

        All members start together. The joined promise succeeds only when every
        member succeeds, with results in the order of *promises* (not in order
        of completion). If any member fails, the others are cancelled and the
        joined promise fails with that member's error; partial results are never
        delivered.
        """
        members = list(promises)

        async def joined() -> list[T]:
            if not members:
                return []
            tasks = [asyncio.ensure_future(member.run()) for member in members]
            try:
                done, pending = await asyncio.wait(
                    tasks, return_when=asyncio.FIRST_EXCEPTION
                )
                failures = [
                    task
                    for task in tasks
                    if task in done and not task.cancelled() and task.exception()
                ]
                if failures:
                    for task in pending:
                        task.cancel()
                    if pending:
                        await asyncio.wait(pending)
                    raise failures[0].exception()  # type: ignore[misc]
                return [task.result() for task in tasks]
            finally:
                for task in tasks:
                    if not task.done():
                        task.cancel()

        labels = ", ".join(member.label for member in members)
        return Promise(joined, label=f"queue[{labels}]")

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def start(
        self,
        on_success: Callable[[T], Any] | None = None,
        on_failure: Callable[[BaseException], Any] | None = None,
        *,
        context: ExecutionContext = INLINE,
        loop: asyncio.AbstractEventLoop | None = None,
        owner: str | None = None,
        handle: AsyncTask | None = None,
    ) -> AsyncTask:
        """Schedule the chain and return a cancellable handle right away.

        Exactly one of *on_success* / *on_failure* is invoked, once, on
        *context*, unless the handle is cancelled first. A failure without an
        *on_failure* callback is logged at error level.

        Args:
            on_success: Receives the resolved value.
            on_failure: Receives the exception that failed the chain.
            context: Where the callback runs. Defaults to inline delivery on the
                loop that ran the chain.
            loop: Event loop to run the chain on. Defaults to the running loop;
                a loop owned by another thread is accepted too.
            owner: Label stored on the new handle.
            handle: Pre-created handle to drive instead of a fresh one.

        Returns:
            The task handle for this run.

        Raises:
            RuntimeError: If *loop* is omitted and no event loop is running.
        """
        task = handle or AsyncTask(owner=owner or self.label)

        async def drive() -> None:
            try:
                value = await self.run()
            except asyncio.CancelledError:
                logger.debug("Chain %s cancelled", self.label)
                raise
            except Exception as exc:  # noqa: BLE001
                logger.debug("Chain %s failed: %s", self.label, exc)
                context.dispatch(task._deliver, on_failure, exc)
            else:
                context.dispatch(task._deliver, on_success, value)

        try:
            running: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        target = loop or running
        if target is None:
            raise RuntimeError(f"No event loop available to start {self!r}")

        logger.debug("Starting chain %s", self.label)
        if target is running:
            task._attach(target.create_task(drive()), target)
        else:
            task._attach(asyncio.run_coroutine_threadsafe(drive(), target), target)
        return task
