"""Promise, task handle and delivery context primitives.

Every network-facing operation in animelink returns a :class:`Promise`.
Starting one yields an :class:`AsyncTask` that can be cancelled; screens keep
their handles in a :class:`TaskSlot` so that a new request always cancels the
one it replaces.
"""

from animelink.concurrency.context import (
    INLINE,
    ExecutionContext,
    ExecutorContext,
    InlineContext,
    LoopContext,
)
from animelink.concurrency.promise import Promise
from animelink.concurrency.task import AsyncTask, TaskSlot, TaskState

__all__ = [
    "INLINE",
    "AsyncTask",
    "ExecutionContext",
    "ExecutorContext",
    "InlineContext",
    "LoopContext",
    "Promise",
    "TaskSlot",
    "TaskState",
]
