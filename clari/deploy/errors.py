"""Error taxonomy for the deploy flow.

Every failure carries the stage it originated from and the HTTP status the
entry point answers with, so the controller never has to guess.
"""

from __future__ import annotations


class DeploymentFailure(RuntimeError):
    """Base class for every failure surfaced by the deploy flow."""

    stage: str = "deploy"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(DeploymentFailure):
    """Raised when required configuration is missing or unreadable."""

    stage = "configuration"
    status_code = 500


class StackError(DeploymentFailure):
    """Raised when the stack lands in a failed state or polling runs out."""

    stage = "stack"
    status_code = 502

    def __init__(self, message: str, *, reason: str, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.reason = reason


class StackTimeoutError(StackError):
    """Raised when a poll loop exceeds its attempt bound."""

    status_code = 504

    def __init__(self, message: str, **kwargs) -> None:
        super().__init__(message, reason="timeout", **kwargs)


class DeployError(DeploymentFailure):
    """Raised when the function code cannot be packaged or replaced."""

    stage = "code_update"
    status_code = 502


class PackagingError(DeployError):
    """Raised when the local archive cannot be produced."""

    stage = "package"
    status_code = 500


class WiringError(DeploymentFailure):
    """Raised when the bucket notification cannot be registered."""

    stage = "wiring"
    status_code = 502


__all__ = [
    "ConfigurationError",
    "DeployError",
    "DeploymentFailure",
    "PackagingError",
    "StackError",
    "StackTimeoutError",
    "WiringError",
]
