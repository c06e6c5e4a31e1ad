"""Prometheus metrics for the IVK Skill SDK.

Registered on the default prometheus_client registry, so an application
that already exposes /metrics picks them up without extra wiring.
Useful alerts:
- ivk_sdk_retries_total (a flapping dependency shows up here first)
- ivk_sdk_requests_total{outcome!="success"} (terminal failures)
"""

from prometheus_client import Counter, Histogram

# === Retry Metrics ===

retries_total = Counter(
    "ivk_sdk_retries_total",
    "Total retries scheduled by operation and cause",
    ["operation", "reason"],
)
"""
Retries counter.

Labels:
- operation: post_match_result, post_pre_match, get_configuration
- reason: transport, rate_limited, server_error
"""

# === Request Metrics ===

requests_total = Counter(
    "ivk_sdk_requests_total",
    "Logical operations by final outcome",
    ["operation", "outcome"],
)
"""
Logical operation counter (one increment per call, not per attempt).

Labels:
- outcome: success, remote_error, transport_error, cancelled, error
  (error: the attempt raised, e.g. an undecodable response body)
"""

request_duration_seconds = Histogram(
    "ivk_sdk_request_duration_seconds",
    "Wall time of a logical operation including backoff waits",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)
