"""
Retry policy engine and operation invoker.

Every logical SDK call runs through a RetryInvoker:

1. Run one attempt, producing an Outcome
2. Ask ``policy.decide`` whether to retry and after what delay
3. Wait (blocking or on the event loop), then try again

Main Components:
    - RetryConfig: Immutable attempt budget and backoff bounds
    - decide / compute_delay_ms: Pure retry decision functions
    - RetryInvoker: Blocking and async execution of one logical operation
    - CancellationToken: Caller-owned cancellation signal

Usage:
    >>> from ivk_skill_sdk.retry import RetryConfig, RetryInvoker
    >>> invoker = RetryInvoker(RetryConfig(max_attempts=5))
    >>> result = invoker.invoke(attempt_fn, operation_name="get_configuration")
"""

from ivk_skill_sdk.retry.cancellation import CancellationToken
from ivk_skill_sdk.retry.config import DEFAULT_RETRY_CONFIG, NO_RETRY, RetryConfig
from ivk_skill_sdk.retry.invoker import OnRetry, RetryEvent, RetryInvoker
from ivk_skill_sdk.retry.outcome import (
    ApplicationFailure,
    Outcome,
    Success,
    TransportFailure,
)
from ivk_skill_sdk.retry.policy import (
    RETRYABLE_STATUS_CODES,
    RetryDecision,
    compute_delay_ms,
    decide,
    is_retryable,
    is_retryable_status,
)

__all__ = [
    "CancellationToken",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "NO_RETRY",
    "RetryInvoker",
    "RetryEvent",
    "OnRetry",
    "Outcome",
    "Success",
    "TransportFailure",
    "ApplicationFailure",
    "RetryDecision",
    "RETRYABLE_STATUS_CODES",
    "compute_delay_ms",
    "decide",
    "is_retryable",
    "is_retryable_status",
]
