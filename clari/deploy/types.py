"""Typed containers shared across the deploy flow.

These live in their own module so the stage modules (`prober`, `lifecycle`,
`packager`, `code_updater`, `wiring`, `orchestrator`) can import them without
creating circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Sequence


class StackState(str, Enum):
    """Stack statuses the lifecycle controller reasons about."""

    NOT_FOUND = "NOT_FOUND"
    CREATE_IN_PROGRESS = "CREATE_IN_PROGRESS"
    CREATE_COMPLETE = "CREATE_COMPLETE"
    CREATE_FAILED = "CREATE_FAILED"
    UPDATE_IN_PROGRESS = "UPDATE_IN_PROGRESS"
    UPDATE_COMPLETE = "UPDATE_COMPLETE"
    ROLLBACK_COMPLETE = "ROLLBACK_COMPLETE"
    UPDATE_ROLLBACK_COMPLETE = "UPDATE_ROLLBACK_COMPLETE"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
    DELETE_COMPLETE = "DELETE_COMPLETE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_status(cls, status: str | None) -> "StackState":
        """Map a raw CloudFormation status onto the enum, UNKNOWN otherwise."""

        if not status:
            return cls.UNKNOWN
        try:
            return cls(status)
        except ValueError:
            return cls.UNKNOWN


# Terminal states that cannot be updated in place and must be recreated.
UNRECOVERABLE_STATES = frozenset(
    {
        StackState.CREATE_FAILED,
        StackState.ROLLBACK_COMPLETE,
        StackState.UPDATE_ROLLBACK_COMPLETE,
    }
)
SUCCESS_STATES = frozenset({StackState.CREATE_COMPLETE, StackState.UPDATE_COMPLETE})
DELETING_STATES = frozenset({StackState.DELETE_IN_PROGRESS, StackState.DELETE_COMPLETE})


@dataclass(frozen=True)
class StackSnapshot:
    """Read-only result of a single describe call."""

    state: StackState
    status: str
    outputs: Mapping[str, str] = field(default_factory=dict)
    reason: str | None = None

    @property
    def exists(self) -> bool:
        return self.state is not StackState.NOT_FOUND

    @property
    def failed(self) -> bool:
        """True when the raw status carries a FAILED marker or is rollback-terminal."""

        return "FAILED" in self.status or self.state is StackState.ROLLBACK_COMPLETE

    @classmethod
    def absent(cls) -> "StackSnapshot":
        return cls(state=StackState.NOT_FOUND, status=StackState.NOT_FOUND.value)


@dataclass(frozen=True)
class StackDescriptor:
    """Everything needed to create or update the single managed stack."""

    name: str
    region: str
    template_body: str
    parameters: Sequence[tuple[str, str]] = ()
    capabilities: Sequence[str] = ()

    def to_request(self) -> dict[str, Any]:
        """Render the keyword arguments shared by create_stack and update_stack."""

        request: dict[str, Any] = {
            "StackName": self.name,
            "TemplateBody": self.template_body,
            "Parameters": [
                {"ParameterKey": key, "ParameterValue": value}
                for key, value in self.parameters
            ],
        }
        if self.capabilities:
            request["Capabilities"] = list(self.capabilities)
        return request


@dataclass(frozen=True)
class DeploymentOutputs:
    """Stack outputs read once the stack reaches a COMPLETE state."""

    values: Mapping[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def as_dict(self) -> dict[str, str]:
        return dict(self.values)


@dataclass(frozen=True)
class ArtifactBundle:
    """A packaged function archive staged on local disk."""

    path: Path
    size_bytes: int
    file_count: int

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


class PermissionGrant(str, Enum):
    """Outcome of the invoke-permission step of the wiring connector."""

    GRANTED = "granted"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


@dataclass(frozen=True)
class WiringRecord:
    """Permission + notification pair applied on every deploy."""

    bucket_name: str
    function_arn: str
    events: Sequence[str]
    statement_id: str
    permission: PermissionGrant


@dataclass(frozen=True)
class DeployResult:
    """Structured outcome of one successful deploy invocation."""

    outputs: DeploymentOutputs
    bucket_name: str
    function_arn: str
    function_name: str
    wiring: WiringRecord

    @property
    def message(self) -> str:
        return f"Lambda deployed and connected to S3 bucket: {self.bucket_name}"


__all__ = [
    "ArtifactBundle",
    "DELETING_STATES",
    "DeployResult",
    "DeploymentOutputs",
    "PermissionGrant",
    "SUCCESS_STATES",
    "StackDescriptor",
    "StackSnapshot",
    "StackState",
    "UNRECOVERABLE_STATES",
    "WiringRecord",
]
