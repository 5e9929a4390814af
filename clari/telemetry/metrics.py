"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

DEPLOY_COUNTER = Counter(
    "clari_deploys_total",
    "Deploy invocations by outcome and the stage that ended them",
    ("outcome", "stage"),
)

DEPLOY_DURATION = Histogram(
    "clari_deploy_duration_seconds",
    "Wall time of a full deploy invocation",
    buckets=(1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0),
)

STACK_POLL_ATTEMPTS = Histogram(
    "clari_stack_poll_attempts",
    "Status polls needed before a stack reached a terminal state",
    buckets=(1, 2, 3, 5, 10, 20, 40, 60, 120),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def observe_deploy(outcome: str, stage: str, duration_seconds: float) -> None:
    """Record the outcome of one deploy invocation."""

    DEPLOY_COUNTER.labels(outcome=outcome, stage=stage).inc()
    DEPLOY_DURATION.observe(max(0.0, duration_seconds))


def observe_stack_polls(attempts: int) -> None:
    STACK_POLL_ATTEMPTS.observe(attempts)
