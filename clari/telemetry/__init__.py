"""Telemetry helpers and metrics."""

from .metrics import (
    DEPLOY_COUNTER,
    DEPLOY_DURATION,
    ERROR_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    STACK_POLL_ATTEMPTS,
    observe_deploy,
    observe_request,
    observe_stack_polls,
)

__all__ = [
    "DEPLOY_COUNTER",
    "DEPLOY_DURATION",
    "ERROR_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "STACK_POLL_ATTEMPTS",
    "observe_deploy",
    "observe_request",
    "observe_stack_polls",
]
