"""
Unit tests for the retry policy.

Covers outcome classification, the backoff schedule and the attempt budget.
"""

import httpx
import pytest

from ivk_skill_sdk.retry.config import NO_RETRY, RetryConfig
from ivk_skill_sdk.retry.outcome import ApplicationFailure, Success, TransportFailure
from ivk_skill_sdk.retry.policy import (
    RetryDecision,
    compute_delay_ms,
    decide,
    is_retryable,
    is_retryable_status,
)


DEFAULTS = RetryConfig()


# ============================================================================
# Classification
# ============================================================================


@pytest.mark.parametrize("status_code", [429, 500, 501, 502, 503, 504, 599])
def test_retryable_status_codes(status_code):
    assert is_retryable_status(status_code) is True


@pytest.mark.parametrize("status_code", [400, 401, 403, 404, 409, 422])
def test_terminal_status_codes(status_code):
    assert is_retryable_status(status_code) is False


def test_network_failure_is_retryable():
    outcome = TransportFailure(httpx.ConnectError("connection refused"))
    assert is_retryable(outcome) is True


def test_timeout_is_retryable():
    outcome = TransportFailure(httpx.ReadTimeout("timed out"))
    assert is_retryable(outcome) is True


def test_caller_cancellation_is_not_retryable():
    outcome = TransportFailure(httpx.ReadTimeout("timed out"), cancelled=True)
    assert is_retryable(outcome) is False


def test_success_is_never_retryable():
    assert is_retryable(Success("ok")) is False


def test_unknown_outcome_type_rejected():
    with pytest.raises(TypeError):
        is_retryable("not an outcome")


# ============================================================================
# Backoff schedule
# ============================================================================


def test_default_schedule_doubles_then_clamps():
    delays = [compute_delay_ms(n, DEFAULTS) for n in range(1, 9)]
    assert delays == [500, 1000, 2000, 4000, 8000, 10000, 10000, 10000]


def test_first_retry_uses_initial_delay():
    config = RetryConfig(initial_delay_ms=250, max_delay_ms=1000)
    assert compute_delay_ms(1, config) == 250


def test_huge_retry_number_stays_clamped():
    assert compute_delay_ms(10_000, DEFAULTS) == 10000


def test_zero_initial_delay():
    config = RetryConfig(initial_delay_ms=0, max_delay_ms=1000)
    assert compute_delay_ms(5, config) == 0


def test_initial_delay_above_max_is_clamped():
    config = RetryConfig(initial_delay_ms=5000, max_delay_ms=1000)
    assert compute_delay_ms(1, config) == 1000


def test_retry_number_must_be_positive():
    with pytest.raises(ValueError):
        compute_delay_ms(0, DEFAULTS)


# ============================================================================
# decide()
# ============================================================================


def test_decide_retries_server_error_with_backoff():
    decision = decide(ApplicationFailure(503), attempt_number=1, config=DEFAULTS)
    assert decision == RetryDecision(should_retry=True, delay_ms=500)
    assert decision.delay == 0.5


def test_decide_uses_attempt_number_for_delay():
    decision = decide(ApplicationFailure(502), attempt_number=2, config=DEFAULTS)
    assert decision.delay_ms == 1000


def test_decide_stops_on_terminal_status():
    decision = decide(ApplicationFailure(404), attempt_number=1, config=DEFAULTS)
    assert decision.should_retry is False
    assert decision.delay_ms == 0


def test_decide_stops_on_success():
    assert decide(Success(1), attempt_number=1, config=DEFAULTS).should_retry is False


def test_decide_stops_when_budget_spent():
    decision = decide(ApplicationFailure(503), attempt_number=3, config=DEFAULTS)
    assert decision.should_retry is False


def test_no_retry_preset_never_retries():
    outcome = TransportFailure(httpx.ConnectError("down"))
    assert decide(outcome, attempt_number=1, config=NO_RETRY).should_retry is False


def test_decide_is_pure():
    outcome = ApplicationFailure(429)
    decisions = {decide(outcome, 2, DEFAULTS) for _ in range(5)}
    assert decisions == {RetryDecision(should_retry=True, delay_ms=1000)}
