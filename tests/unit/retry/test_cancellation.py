"""
Unit tests for CancellationToken and its interaction with RetryInvoker.

Backoff delays here are long (10s); each test asserts the invoker returns
well before that, so a wait that ignored the token would be caught.
"""

import asyncio
import threading
import time

import pytest

from ivk_skill_sdk.errors import OperationCancelledError
from ivk_skill_sdk.retry.cancellation import CancellationToken
from ivk_skill_sdk.retry.config import RetryConfig
from ivk_skill_sdk.retry.invoker import RetryInvoker
from ivk_skill_sdk.retry.outcome import ApplicationFailure, Success

SLOW_BACKOFF = RetryConfig(max_attempts=3, initial_delay_ms=10_000, max_delay_ms=10_000)
BOUND_SECONDS = 2.0


# ============================================================================
# Token
# ============================================================================


def test_token_starts_uncancelled():
    token = CancellationToken()
    assert token.cancelled is False
    token.raise_if_cancelled()


def test_cancel_sets_reason_once():
    token = CancellationToken()
    token.cancel("user pressed stop")
    token.cancel("second call ignored")
    assert token.cancelled is True
    assert token.reason == "user pressed stop"


def test_raise_if_cancelled():
    token = CancellationToken()
    token.cancel()
    with pytest.raises(OperationCancelledError):
        token.raise_if_cancelled()


def test_callbacks_fire_once_on_cancel():
    token = CancellationToken()
    fired = []
    token.register(lambda: fired.append(1))
    token.cancel()
    token.cancel()
    assert fired == [1]


def test_register_after_cancel_fires_immediately():
    token = CancellationToken()
    token.cancel()
    fired = []
    token.register(lambda: fired.append(1))
    assert fired == [1]


def test_unregister_removes_callback():
    token = CancellationToken()
    fired = []
    unregister = token.register(lambda: fired.append(1))
    unregister()
    token.cancel()
    assert fired == []


def test_wait_returns_early_when_cancelled_from_other_thread():
    token = CancellationToken()
    threading.Timer(0.05, token.cancel).start()

    start = time.monotonic()
    assert token.wait(10) is True
    assert time.monotonic() - start < BOUND_SECONDS


# ============================================================================
# Invoker integration
# ============================================================================


class CountingOperation:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.outcome

    async def run_async(self):
        self.calls += 1
        return self.outcome


def test_pre_cancelled_token_prevents_any_attempt():
    token = CancellationToken()
    token.cancel()
    operation = CountingOperation(Success("never"))

    with pytest.raises(OperationCancelledError):
        RetryInvoker(SLOW_BACKOFF).invoke(operation, cancellation=token)
    assert operation.calls == 0


def test_blocking_backoff_aborts_on_cancel():
    token = CancellationToken()
    operation = CountingOperation(ApplicationFailure(503))
    threading.Timer(0.1, token.cancel).start()

    start = time.monotonic()
    with pytest.raises(OperationCancelledError):
        RetryInvoker(SLOW_BACKOFF).invoke(operation, cancellation=token)

    assert time.monotonic() - start < BOUND_SECONDS
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_async_backoff_aborts_on_cancel():
    token = CancellationToken()
    operation = CountingOperation(ApplicationFailure(503))
    asyncio.get_running_loop().call_later(0.1, token.cancel)

    start = time.monotonic()
    with pytest.raises(OperationCancelledError):
        await RetryInvoker(SLOW_BACKOFF).invoke_async(
            operation.run_async, cancellation=token
        )

    assert time.monotonic() - start < BOUND_SECONDS
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_async_backoff_aborts_on_cancel_from_thread():
    token = CancellationToken()
    operation = CountingOperation(ApplicationFailure(429))
    threading.Timer(0.1, token.cancel).start()

    start = time.monotonic()
    with pytest.raises(OperationCancelledError):
        await RetryInvoker(SLOW_BACKOFF).invoke_async(
            operation.run_async, cancellation=token
        )

    assert time.monotonic() - start < BOUND_SECONDS
    assert operation.calls == 1


@pytest.mark.asyncio
async def test_async_in_flight_attempt_is_cancelled():
    token = CancellationToken()
    started = asyncio.Event()
    calls = 0

    async def hanging_attempt():
        nonlocal calls
        calls += 1
        started.set()
        await asyncio.sleep(30)
        return Success("never")

    async def cancel_when_started():
        await started.wait()
        token.cancel("shutdown")

    canceller = asyncio.create_task(cancel_when_started())
    start = time.monotonic()
    with pytest.raises(OperationCancelledError) as exc_info:
        await RetryInvoker(SLOW_BACKOFF).invoke_async(
            hanging_attempt, cancellation=token
        )
    await canceller

    assert time.monotonic() - start < BOUND_SECONDS
    assert calls == 1
    assert exc_info.value.details["reason"] == "shutdown"


def test_uncancelled_token_does_not_change_result():
    token = CancellationToken()
    operation = CountingOperation(Success("done"))
    assert RetryInvoker(SLOW_BACKOFF).invoke(operation, cancellation=token) == "done"
