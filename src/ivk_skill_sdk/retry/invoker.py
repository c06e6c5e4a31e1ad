"""
Operation invoker: runs one logical operation under the retry policy.

Two execution modes share the same decision function (``policy.decide``):

- ``invoke``: blocking, the calling thread sleeps through backoff waits
- ``invoke_async``: coroutine, backoff waits suspend on the event loop and
  do not hold a thread

Both modes produce the same attempts, the same retry events and the same
final result or exception for the same sequence of outcomes.

Usage:
    invoker = RetryInvoker(RetryConfig(max_attempts=5))
    result = invoker.invoke(lambda: api.post_match_result(...), operation_name="post_match_result")
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from ivk_skill_sdk.errors import (
    OperationCancelledError,
    TransportError,
    remote_error_for_status,
)
from ivk_skill_sdk.logging_config import get_logger
from ivk_skill_sdk.monitoring.metrics import (
    request_duration_seconds,
    requests_total,
    retries_total,
)
from ivk_skill_sdk.retry.cancellation import CancellationToken
from ivk_skill_sdk.retry.config import RetryConfig
from ivk_skill_sdk.retry.outcome import (
    ApplicationFailure,
    Outcome,
    Success,
    TransportFailure,
)
from ivk_skill_sdk.retry.policy import RetryDecision, decide

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryEvent:
    """
    Emitted once per scheduled retry, before the backoff wait starts.

    Attributes:
        operation: Logical operation name (e.g. post_match_result)
        attempt: Retry number, 1 for the first retry
        max_retries: ``max_attempts - 1``
        delay_ms: Backoff about to be applied
        cause: Human-readable description of the failed attempt
    """
    operation: str
    attempt: int
    max_retries: int
    delay_ms: int
    cause: str


OnRetry = Callable[[RetryEvent], None]
SyncOperation = Callable[[], Outcome]
AsyncOperation = Callable[[], Awaitable[Outcome]]


def _retry_reason(outcome: Outcome) -> str:
    if isinstance(outcome, TransportFailure):
        return "transport"
    if isinstance(outcome, ApplicationFailure) and outcome.status_code == 429:
        return "rate_limited"
    return "server_error"


def _outcome_label(outcome: Outcome) -> str:
    """``outcome`` label of ivk_sdk_requests_total for a final outcome."""
    if isinstance(outcome, Success):
        return "success"
    if isinstance(outcome, ApplicationFailure):
        return "remote_error"
    if isinstance(outcome, TransportFailure) and outcome.cancelled:
        return "cancelled"
    return "transport_error"


def _resolve(future: "asyncio.Future[None]") -> None:
    if not future.done():
        future.set_result(None)


class RetryInvoker:
    """
    Executes zero-argument operations with bounded exponential-backoff retry.

    The invoker holds only its immutable config and hooks; every call keeps
    its own attempt counter, so one instance can serve concurrent calls from
    several threads or tasks.

    Attributes:
        config: Retry configuration applied to every call
    """

    def __init__(
        self,
        config: RetryConfig,
        *,
        on_retry: Optional[OnRetry] = None,
        logger: Optional[Any] = None,
    ):
        """
        Initialize invoker.

        Args:
            config: Retry configuration
            on_retry: Optional callback receiving a RetryEvent per retry.
                Exceptions it raises are logged and ignored.
            logger: structlog-style logger for retry events (defaults to
                this module's logger)
        """
        self.config = config
        self._on_retry = on_retry
        self._logger = logger or get_logger(__name__)

    # ===== Blocking mode =====

    def invoke(
        self,
        operation: SyncOperation,
        *,
        operation_name: str = "operation",
        cancellation: Optional[CancellationToken] = None,
    ) -> Any:
        """
        Run ``operation`` until success, a terminal failure, or exhaustion.

        Args:
            operation: Performs exactly one attempt and returns its Outcome
            operation_name: Used in logs, metrics and retry events
            cancellation: Optional caller-owned cancellation token

        Returns:
            The value carried by the final Success outcome

        Raises:
            RemoteError: Final attempt got a non-success status code
            TransportError: Final attempt failed at the network level
            OperationCancelledError: Token fired before an attempt or during backoff
        """
        start = time.perf_counter()
        outcome_label = "error"
        attempt_number = 1
        try:
            while True:
                if cancellation is not None:
                    cancellation.raise_if_cancelled()

                outcome = operation()
                if (
                    cancellation is not None
                    and cancellation.cancelled
                    and isinstance(outcome, TransportFailure)
                ):
                    outcome = TransportFailure(outcome.cause, cancelled=True)

                decision = decide(outcome, attempt_number, self.config)
                if not decision.should_retry:
                    outcome_label = _outcome_label(outcome)
                    return self._finish(outcome, operation_name, attempt_number)

                if cancellation is not None:
                    cancellation.raise_if_cancelled()
                self._emit_retry(operation_name, attempt_number, decision, outcome)

                if cancellation is not None:
                    if cancellation.wait(decision.delay):
                        cancellation.raise_if_cancelled()
                elif decision.delay_ms > 0:
                    time.sleep(decision.delay)

                attempt_number += 1
        except OperationCancelledError:
            outcome_label = "cancelled"
            raise
        finally:
            requests_total.labels(operation=operation_name, outcome=outcome_label).inc()
            request_duration_seconds.labels(operation=operation_name).observe(
                time.perf_counter() - start
            )

    # ===== Non-blocking mode =====

    async def invoke_async(
        self,
        operation: AsyncOperation,
        *,
        operation_name: str = "operation",
        cancellation: Optional[CancellationToken] = None,
    ) -> Any:
        """
        Async counterpart of :meth:`invoke`.

        Backoff waits are awaited on the running loop. Cancelling the
        surrounding asyncio task raises ``asyncio.CancelledError``, which is
        never retried. If ``cancellation`` fires while an attempt is in
        flight, that attempt is cancelled and OperationCancelledError raised.
        """
        start = time.perf_counter()
        outcome_label = "error"
        attempt_number = 1
        try:
            while True:
                if cancellation is not None:
                    cancellation.raise_if_cancelled()

                outcome = await self._run_attempt_async(operation, cancellation)

                decision = decide(outcome, attempt_number, self.config)
                if not decision.should_retry:
                    outcome_label = _outcome_label(outcome)
                    return self._finish(outcome, operation_name, attempt_number)

                if cancellation is not None:
                    cancellation.raise_if_cancelled()
                self._emit_retry(operation_name, attempt_number, decision, outcome)
                await self._wait_async(decision.delay, cancellation)

                attempt_number += 1
        except (OperationCancelledError, asyncio.CancelledError):
            outcome_label = "cancelled"
            raise
        finally:
            requests_total.labels(operation=operation_name, outcome=outcome_label).inc()
            request_duration_seconds.labels(operation=operation_name).observe(
                time.perf_counter() - start
            )

    async def _run_attempt_async(
        self,
        operation: AsyncOperation,
        cancellation: Optional[CancellationToken],
    ) -> Outcome:
        """Await one attempt, racing it against the cancellation token."""
        if cancellation is None:
            return await operation()

        loop = asyncio.get_running_loop()
        attempt_task = asyncio.ensure_future(operation())
        cancelled = loop.create_future()
        unregister = cancellation.register(
            lambda: loop.call_soon_threadsafe(_resolve, cancelled)
        )
        try:
            await asyncio.wait(
                {attempt_task, cancelled}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            attempt_task.cancel()
            raise
        finally:
            unregister()
            if not cancelled.done():
                cancelled.cancel()

        if attempt_task.done():
            return attempt_task.result()

        attempt_task.cancel()
        await asyncio.gather(attempt_task, return_exceptions=True)
        return TransportFailure(
            OperationCancelledError(
                "Operation cancelled by caller during request",
                details={"reason": cancellation.reason},
            ),
            cancelled=True,
        )

    @staticmethod
    async def _wait_async(
        delay: float, cancellation: Optional[CancellationToken]
    ) -> None:
        """Sleep ``delay`` seconds unless the token fires first."""
        if cancellation is None:
            await asyncio.sleep(delay)
            return

        loop = asyncio.get_running_loop()
        woken = loop.create_future()
        unregister = cancellation.register(
            lambda: loop.call_soon_threadsafe(_resolve, woken)
        )
        try:
            await asyncio.wait_for(woken, timeout=delay)
        except asyncio.TimeoutError:
            return
        finally:
            unregister()
        cancellation.raise_if_cancelled()

    # ===== Shared =====

    def _finish(self, outcome: Outcome, operation_name: str, attempts: int) -> Any:
        """Turn the final outcome into a return value or an exception."""
        if isinstance(outcome, Success):
            if attempts > 1:
                self._logger.info(
                    f"{operation_name} succeeded after {attempts} attempts",
                    operation=operation_name,
                    attempts=attempts,
                )
            return outcome.value

        if isinstance(outcome, ApplicationFailure):
            error = remote_error_for_status(outcome.status_code, outcome.body)
            error.details["attempts"] = attempts
            error.details["operation"] = operation_name
            raise error from outcome.cause

        if isinstance(outcome, TransportFailure):
            if outcome.cancelled:
                if isinstance(outcome.cause, OperationCancelledError):
                    raise outcome.cause
                raise OperationCancelledError(
                    "Operation cancelled by caller during request",
                    details={"operation": operation_name, "attempts": attempts},
                ) from outcome.cause
            raise TransportError(
                f"Transport failure calling {operation_name}: {outcome.describe()}",
                details={
                    "operation": operation_name,
                    "attempts": attempts,
                    "error_type": type(outcome.cause).__name__,
                },
            ) from outcome.cause

        raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")

    def _emit_retry(
        self,
        operation_name: str,
        attempt_number: int,
        decision: RetryDecision,
        outcome: Outcome,
    ) -> None:
        """Log, count and publish a RetryEvent. Never raises."""
        event = RetryEvent(
            operation=operation_name,
            attempt=attempt_number,
            max_retries=self.config.max_retries,
            delay_ms=decision.delay_ms,
            cause=outcome.describe(),
        )
        try:
            retries_total.labels(
                operation=operation_name, reason=_retry_reason(outcome)
            ).inc()
            self._logger.warning(
                f"Retry attempt {event.attempt}/{event.max_retries} "
                f"after {event.delay_ms}ms: {event.cause}",
                operation=event.operation,
                attempt=event.attempt,
                max_retries=event.max_retries,
                delay_ms=event.delay_ms,
                cause=event.cause,
            )
        except Exception as e:
            logger.debug("Failed to record retry event", error=str(e))

        if self._on_retry is None:
            return
        try:
            self._on_retry(event)
        except Exception as e:
            logger.warning(
                "on_retry callback raised, ignoring",
                operation=operation_name,
                error=str(e),
                error_type=type(e).__name__,
            )
