"""Prometheus metrics for the provider orchestration layer."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


# ── HTTP metrics ─────────────────────────────────────────────
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Provider metrics ─────────────────────────────────────────
PROVIDER_ATTEMPTS = Counter(
    "ai_provider_attempts_total",
    "Provider invocation attempts",
    ["provider", "outcome"],  # outcome = success | <error kind>
)

PROVIDER_QUARANTINES = Counter(
    "ai_provider_quarantines_total",
    "Providers placed in quarantine",
    ["provider", "error_kind"],
)

PROVIDER_REACTIVATIONS = Counter(
    "ai_provider_reactivations_total",
    "Providers restored to rotation",
    ["provider", "trigger"],  # lazy | scheduler | manual | success
)

PROVIDER_AVAILABLE = Gauge(
    "ai_provider_available",
    "1 when the provider is eligible for selection",
    ["provider"],
)

# ── Dispatch metrics ─────────────────────────────────────────
DISPATCH_TOTAL = Counter(
    "ai_dispatch_total",
    "Generation requests dispatched",
    ["status"],  # success | all_providers_unavailable
)

DISPATCH_LATENCY = Histogram(
    "ai_dispatch_latency_seconds",
    "End-to-end dispatch latency including failover",
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0),
)
