"""
Retry policy: classification and backoff schedule.

Everything here is a pure function of its arguments, so the blocking and
async invokers cannot disagree about what to do with a given outcome.
"""

from dataclasses import dataclass

from ivk_skill_sdk.retry.config import RetryConfig
from ivk_skill_sdk.retry.outcome import (
    ApplicationFailure,
    Outcome,
    Success,
    TransportFailure,
)

RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})


@dataclass(frozen=True)
class RetryDecision:
    """Whether to try again, and how long to wait first."""
    should_retry: bool
    delay_ms: int = 0

    @property
    def delay(self) -> float:
        return self.delay_ms / 1000.0


STOP = RetryDecision(should_retry=False)


def is_retryable_status(status_code: int) -> bool:
    """429, 502, 503, 504 and every other 5xx are worth another try."""
    return status_code in RETRYABLE_STATUS_CODES or status_code >= 500


def is_retryable(outcome: Outcome) -> bool:
    """Classify a single attempt's outcome, ignoring the attempt budget."""
    if isinstance(outcome, Success):
        return False
    if isinstance(outcome, TransportFailure):
        return not outcome.cancelled
    if isinstance(outcome, ApplicationFailure):
        return is_retryable_status(outcome.status_code)
    raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")


def compute_delay_ms(retry_number: int, config: RetryConfig) -> int:
    """
    Delay before retry ``retry_number`` (1 = first retry).

    ``min(initial_delay_ms * 2**(n-1), max_delay_ms)``, no jitter.

    Raises:
        ValueError: retry_number < 1
    """
    if retry_number < 1:
        raise ValueError(f"retry_number must be >= 1, got {retry_number}")
    if config.initial_delay_ms == 0:
        return 0
    # Past this exponent the product already exceeds max_delay_ms.
    exponent = min(retry_number - 1, config.max_delay_ms.bit_length())
    return min(config.initial_delay_ms * (2 ** exponent), config.max_delay_ms)


def decide(outcome: Outcome, attempt_number: int, config: RetryConfig) -> RetryDecision:
    """
    Decide what to do after attempt ``attempt_number`` (1-based) completed.

    The attempt budget wins over classification: once ``max_attempts``
    attempts have been made, the outcome is final whatever it is.
    """
    if attempt_number >= config.max_attempts:
        return STOP
    if not is_retryable(outcome):
        return STOP
    return RetryDecision(
        should_retry=True,
        delay_ms=compute_delay_ms(attempt_number, config),
    )
