"""Cancellable task handles and single-owner task slots.

An :class:`AsyncTask` is returned whenever a promise chain is started. It
moves from ``pending`` to exactly one terminal state: ``completed`` when its
callback is delivered, or ``cancelled`` when :meth:`AsyncTask.cancel` wins the
race. Delivery and cancellation both go through the same lock, so a cancelled
handle never fires a callback afterwards, regardless of which thread or loop
was about to deliver it.

A :class:`TaskSlot` is the one retained handle a screen keeps per kind of
request (e.g. "current episode fetch"). The only allowed way to put a new
request into an occupied slot is cancel-then-replace.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from enum import Enum
from typing import Any, Callable, Union

from animelink.errors import TaskSlotViolation

__all__ = ["AsyncTask", "TaskSlot", "TaskState"]

logger = logging.getLogger(__name__)

_Runner = Union["asyncio.Task[Any]", "concurrent.futures.Future[Any]"]


class TaskState(str, Enum):
    """Lifecycle state of an :class:`AsyncTask`."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AsyncTask:
    """Handle for one in-flight request chain.

    The handle owns no other tasks. Cancelling it stops delivery and asks the
    underlying asyncio task to stop, which in turn cancels whatever request
    the transport had in flight. It does not wait for that to happen.
    """

    def __init__(self, owner: str | None = None) -> None:
        self.owner = owner
        self._state = TaskState.PENDING
        self._lock = threading.Lock()
        self._runner: _Runner | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def __repr__(self) -> str:
        return f"AsyncTask(owner={self.owner!r}, state={self._state.value})"

    @property
    def state(self) -> TaskState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._state is TaskState.PENDING

    @property
    def is_completed(self) -> bool:
        return self._state is TaskState.COMPLETED

    @property
    def is_cancelled(self) -> bool:
        return self._state is TaskState.CANCELLED

    def cancel(self) -> None:
        """Abandon the task. Idempotent and safe to call from any thread."""
        with self._lock:
            if self._state is not TaskState.PENDING:
                return
            self._state = TaskState.CANCELLED
            runner, loop = self._runner, self._loop
        logger.debug("Cancelled %r", self)
        if runner is None or runner.done():
            return
        if isinstance(runner, concurrent.futures.Future):
            runner.cancel()
            return
        if loop is None or loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            runner.cancel()
        else:
            loop.call_soon_threadsafe(runner.cancel)

    async def wait(self) -> None:
        """Wait until the underlying chain has finished running.

        Returns normally whether the chain succeeded, failed or was cancelled.
        Callbacks dispatched to a non-inline context may still be queued.
        """
        runner = self._runner
        if runner is None:
            return
        if isinstance(runner, concurrent.futures.Future):
            future: asyncio.Future[Any] = asyncio.wrap_future(runner)
        else:
            future = runner
        await asyncio.wait([future])

    # ------------------------------------------------------------------
    # Used by Promise.start
    # ------------------------------------------------------------------
    def _attach(self, runner: _Runner, loop: asyncio.AbstractEventLoop) -> None:
        with self._lock:
            self._runner = runner
            self._loop = loop
            cancelled = self._state is TaskState.CANCELLED
        if cancelled:
            runner.cancel()

    def _claim(self) -> bool:
        """Move to ``completed`` if still pending. True means: deliver now."""
        with self._lock:
            if self._state is not TaskState.PENDING:
                return False
            self._state = TaskState.COMPLETED
            return True

    def _deliver(self, callback: Callable[[Any], Any] | None, payload: Any) -> None:
        if not self._claim():
            logger.debug("Dropped delivery for %r", self)
            return
        if callback is None:
            if isinstance(payload, BaseException):
                logger.error("Unhandled failure in %r: %s", self, payload)
            return
        try:
            callback(payload)
        except Exception:  # noqa: BLE001
            logger.exception("Completion callback of %r raised", self)


class TaskSlot:
    """Exclusive holder of the current task for one logical request.

    Use :meth:`replace` (or :meth:`start`) to put a new task in; it cancels the
    previous one first. :meth:`assign` refuses to overwrite a pending task and
    raises :class:`~animelink.errors.TaskSlotViolation` instead.

    The slot also counts deliveries made through callbacks it wrapped, and
    records a violation whenever a task that is no longer current delivers.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.deliveries = 0
        self.violations = 0
        self._task: AsyncTask | None = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"TaskSlot({self.name!r}, current={self._task!r})"

    @property
    def current(self) -> AsyncTask | None:
        return self._task

    @property
    def busy(self) -> bool:
        task = self._task
        return task is not None and task.is_pending

    def assign(self, task: AsyncTask) -> None:
        """Store *task*, refusing to silently orphan a pending one."""
        with self._lock:
            if self._task is not None and self._task.is_pending:
                raise TaskSlotViolation(
                    f"Slot '{self.name}' still holds pending {self._task!r}; "
                    "cancel it before assigning a new task"
                )
            self._task = task

    def replace(self, task: AsyncTask) -> AsyncTask:
        """Cancel the current task (if any), then store *task*."""
        with self._lock:
            previous, self._task = self._task, task
        if previous is not None and previous is not task:
            previous.cancel()
        return task

    def cancel(self) -> None:
        """Cancel and forget the current task."""
        with self._lock:
            previous, self._task = self._task, None
        if previous is not None:
            previous.cancel()

    def start(
        self,
        promise: Any,
        on_success: Callable[[Any], Any] | None = None,
        on_failure: Callable[[BaseException], Any] | None = None,
        **start_kwargs: Any,
    ) -> AsyncTask:
        """Start *promise* in this slot with cancel-then-replace semantics.

        Args:
            promise: The :class:`~animelink.concurrency.promise.Promise` to run.
            on_success: Called once with the resolved value.
            on_failure: Called once with the failure.
            **start_kwargs: Forwarded to ``Promise.start`` (``context``,
                ``loop``).

        Raises:
            RuntimeError: If no event loop is available to run the chain; the
                slot is left empty.

        Returns:
            The new task, already stored as the slot's current task.
        """
        self.cancel()
        task = AsyncTask(owner=self.name)
        self.assign(task)

        def tracked(callback: Callable[[Any], Any] | None) -> Callable[[Any], Any]:
            def deliver(payload: Any) -> None:
                self._record_delivery(task)
                if callback is not None:
                    callback(payload)
                elif isinstance(payload, BaseException):
                    logger.error("Unhandled failure in slot '%s': %s", self.name, payload)

            return deliver

        try:
            promise.start(
                tracked(on_success), tracked(on_failure), handle=task, **start_kwargs
            )
        except BaseException:
            self.cancel()
            raise
        return task

    def _record_delivery(self, task: AsyncTask) -> None:
        with self._lock:
            self.deliveries += 1
            if task is not self._task:
                self.violations += 1
                logger.error(
                    "Stale delivery in slot '%s' from %r (current %r)",
                    self.name,
                    task,
                    self._task,
                )
