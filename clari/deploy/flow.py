"""High-level orchestration map for the deploy flow.

``DeployOrchestrator.deploy`` runs these stages in order; the first failure
aborts the remaining ones:

1. ``configuration`` – resolve the bucket name and read the stack template.
2. ``stack`` – create, update or recreate the CloudFormation stack and wait.
3. ``package`` – zip the function source into the build directory.
4. ``code_update`` – replace the function's code with the new archive.
5. ``wiring`` – grant S3 invoke permission and register the notification.

The stage names match the ``stage`` attribute carried by deploy errors, so an
error response can be traced back to the entry here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class DeployStage:
    """Human-readable description of one stage in the deploy flow."""

    order: int
    name: str
    module: str
    summary: str


class DeployPipeline:
    """Utility wrapper for documenting the `/api/deploy` flow."""

    _STAGES: List[DeployStage] = [
        DeployStage(
            1,
            "configuration",
            "clari.deploy.orchestrator",
            "Require the bucket name and load the stack template from disk.",
        ),
        DeployStage(
            2,
            "stack",
            "clari.deploy.lifecycle",
            "Create, update or delete-and-recreate the stack, then poll until it settles.",
        ),
        DeployStage(
            3,
            "package",
            "clari.deploy.packager",
            "Zip the function source directory at maximum compression.",
        ),
        DeployStage(
            4,
            "code_update",
            "clari.deploy.code_updater",
            "Upload the archive as the function's new code.",
        ),
        DeployStage(
            5,
            "wiring",
            "clari.deploy.wiring",
            "Allow S3 to invoke the function and replace the bucket notification.",
        ),
    ]

    @classmethod
    def describe(cls) -> Iterable[DeployStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)


__all__ = ["DeployPipeline", "DeployStage"]
