"""Deploy flow package.

Modules are organised by the order in which `/api/deploy` executes:

1. `prober` – read the stack status (pure query).
2. `lifecycle` – converge the stack and wait for a terminal state.
3. `packager` – build the function archive.
4. `code_updater` – push the archive to the function.
5. `wiring` – connect the bucket to the function.
6. `orchestrator` – compose the above into one deploy call.
"""

from .clock import SYSTEM_CLOCK, Clock
from .code_updater import FunctionCodeUpdater
from .errors import (
    ConfigurationError,
    DeployError,
    DeploymentFailure,
    PackagingError,
    StackError,
    StackTimeoutError,
    WiringError,
)
from .flow import DeployPipeline, DeployStage
from .lifecycle import StackLifecycleController
from .orchestrator import DeployOrchestrator, build_deploy_orchestrator, load_template
from .packager import ArtifactPackager
from .prober import StackStatusProber
from .types import (
    ArtifactBundle,
    DeployResult,
    DeploymentOutputs,
    PermissionGrant,
    StackDescriptor,
    StackSnapshot,
    StackState,
    WiringRecord,
)
from .wiring import EventWiringConnector

__all__ = [
    "ArtifactBundle",
    "ArtifactPackager",
    "Clock",
    "ConfigurationError",
    "DeployError",
    "DeployOrchestrator",
    "DeployPipeline",
    "DeployResult",
    "DeployStage",
    "DeploymentFailure",
    "DeploymentOutputs",
    "EventWiringConnector",
    "FunctionCodeUpdater",
    "PackagingError",
    "PermissionGrant",
    "SYSTEM_CLOCK",
    "StackDescriptor",
    "StackError",
    "StackLifecycleController",
    "StackSnapshot",
    "StackState",
    "StackStatusProber",
    "StackTimeoutError",
    "WiringError",
    "WiringRecord",
    "build_deploy_orchestrator",
    "load_template",
]
