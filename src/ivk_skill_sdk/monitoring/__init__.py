"""Prometheus instrumentation for the SDK."""

from ivk_skill_sdk.monitoring.metrics import (
    request_duration_seconds,
    requests_total,
    retries_total,
)

__all__ = [
    "retries_total",
    "requests_total",
    "request_duration_seconds",
]
