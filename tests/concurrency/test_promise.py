"""Tests for Promise composition: then, recover, queue and start.

The queue tests use inverse delays so that completion order differs from
input order, which is the case the join has to get right.
"""

import asyncio

import pytest

from animelink.concurrency.promise import Promise
from animelink.errors import DecodeError, TransportError


def delayed(value: object, delay: float, log: list | None = None) -> Promise:
    async def work() -> object:
        await asyncio.sleep(delay)
        if log is not None:
            log.append(value)
        return value

    return Promise(work, label=f"delayed {value}")


def failing(error: Exception, delay: float = 0) -> Promise:
    async def work() -> object:
        await asyncio.sleep(delay)
        raise error

    return Promise(work, label="failing")


@pytest.mark.asyncio
async def test_promise_is_lazy() -> None:
    """Test that the factory does not run until the promise is awaited."""
    calls: list[int] = []

    async def work() -> int:
        calls.append(1)
        return 1

    promise = Promise(work)
    await asyncio.sleep(0)
    assert calls == []
    assert await promise == 1
    assert calls == [1]


@pytest.mark.asyncio
async def test_then_accepts_plain_values_awaitables_and_promises() -> None:
    """Test that a transform may return a value, a coroutine or a Promise."""

    async def double(value: int) -> int:
        return value * 2

    chain = (
        Promise.resolved(1)
        .then(lambda v: v + 1)
        .then(double)
        .then(lambda v: Promise.resolved(v + 10))
    )
    assert await chain == 14


@pytest.mark.asyncio
async def test_failure_skips_later_steps() -> None:
    """Test that the first error short-circuits the rest of the chain."""
    reached: list[str] = []

    def boom(_: int) -> int:
        raise DecodeError("Listing", "bad body")

    chain = (
        Promise.resolved(1)
        .then(boom)
        .then(lambda v: reached.append("after") or v)
    )
    with pytest.raises(DecodeError):
        await chain
    assert reached == []


@pytest.mark.asyncio
async def test_recover_turns_failure_into_value() -> None:
    """Test that recover receives the error and supplies a fallback."""
    seen: list[Exception] = []

    def fallback(exc: Exception) -> str:
        seen.append(exc)
        return "fallback"

    result = await Promise.rejected(TransportError("https://x.test", 500)).recover(fallback)
    assert result == "fallback"
    assert isinstance(seen[0], TransportError)


@pytest.mark.asyncio
async def test_recover_is_not_called_on_success() -> None:
    """Test that recover passes successful values through untouched."""
    result = await Promise.resolved(3).recover(lambda exc: -1)
    assert result == 3


@pytest.mark.asyncio
async def test_firstly_wraps_plain_callable() -> None:
    """Test that firstly starts a chain from a synchronous callable."""
    assert await Promise.firstly(lambda: "start").then(str.upper) == "START"


@pytest.mark.asyncio
async def test_queue_preserves_input_order() -> None:
    """Test that joined results follow input order, not completion order."""
    completed: list[str] = []
    joined = Promise.queue(
        [
            delayed("slow", 0.05, completed),
            delayed("medium", 0.02, completed),
            delayed("fast", 0.0, completed),
        ]
    )
    assert await joined == ["slow", "medium", "fast"]
    assert completed == ["fast", "medium", "slow"]


@pytest.mark.asyncio
async def test_queue_runs_members_concurrently() -> None:
    """Test that members start together instead of one after another."""
    loop = asyncio.get_running_loop()
    started = loop.time()
    await Promise.queue([delayed(n, 0.1) for n in range(5)])
    assert loop.time() - started < 0.4


@pytest.mark.asyncio
async def test_queue_fails_fast_and_cancels_siblings() -> None:
    """Test that a fast failure wins over a slow success and cancels it."""
    completed: list[str] = []
    joined = Promise.queue(
        [delayed("slow", 0.2, completed), failing(TransportError("https://x.test", 503))]
    )
    with pytest.raises(TransportError) as excinfo:
        await joined
    assert excinfo.value.status_code == 503
    await asyncio.sleep(0.25)
    assert completed == []


@pytest.mark.asyncio
async def test_queue_reports_failure_of_second_member() -> None:
    """Test that failure is forwarded whichever member fails."""
    joined = Promise.queue([delayed("ok", 0.0), failing(DecodeError("Listing", "x"), 0.01)])
    with pytest.raises(DecodeError):
        await joined


@pytest.mark.asyncio
async def test_queue_of_nothing_is_empty_list() -> None:
    """Test that an empty queue succeeds with an empty list."""
    assert await Promise.queue([]) == []


def test_queue_label_names_members() -> None:
    """Test that the joined promise is labelled after its members."""
    joined = Promise.queue([Promise.resolved(1), Promise.resolved(2)])
    assert joined.label == "queue[resolved, resolved]"


@pytest.mark.asyncio
async def test_start_delivers_success_once() -> None:
    """Test that start returns a handle and delivers the value exactly once."""
    received: list[int] = []
    task = Promise.resolved(5).start(received.append, lambda exc: received.append(-1))
    assert task.is_pending
    await task.wait()
    assert received == [5]
    assert task.is_completed


@pytest.mark.asyncio
async def test_start_delivers_failure_to_failure_callback() -> None:
    """Test that a failed chain calls only the failure callback."""
    successes: list[object] = []
    failures: list[BaseException] = []
    task = Promise.rejected(DecodeError("Anime", "no results")).start(
        successes.append, failures.append
    )
    await task.wait()
    assert successes == []
    assert len(failures) == 1
    assert isinstance(failures[0], DecodeError)


def test_start_without_loop_raises() -> None:
    """Test that starting outside an event loop without a loop argument fails."""
    with pytest.raises(RuntimeError):
        Promise.resolved(1).start()
