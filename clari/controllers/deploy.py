"""Deploy endpoints.

For a stage-by-stage map see `clari.deploy.flow.DeployPipeline`. The POST
`/api/deploy` call is blocking: it returns only once the stack has settled,
the function code was replaced and the bucket notification registered. All
boto3 work runs in the threadpool so the event loop stays free while the
stack is polled.
"""

import logging
import time
from functools import lru_cache
from typing import Annotated, List, Union

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from clari.config.settings import settings
from clari.deploy import (
    DeploymentFailure,
    DeployOrchestrator,
    DeployPipeline,
    build_deploy_orchestrator,
)
from clari.telemetry import observe_deploy
from clari.views import (
    DeployFailureResponse,
    DeployResponse,
    DeployStageResponse,
    StackStatusResponse,
)

router = APIRouter(prefix="/api/deploy", tags=["deploy"])

logger = logging.getLogger("clari.deploy")


@lru_cache(maxsize=1)
def get_deploy_orchestrator() -> DeployOrchestrator:
    """Return the orchestrator built once from process settings."""

    return build_deploy_orchestrator(settings.deploy, settings.aws)


OrchestratorDep = Annotated[DeployOrchestrator, Depends(get_deploy_orchestrator)]


def _failure_response(exc: DeploymentFailure) -> JSONResponse:
    payload = DeployFailureResponse(error=str(exc), stage=exc.stage)
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump())


@router.post(
    "",
    response_model=DeployResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": DeployFailureResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": DeployFailureResponse},
        status.HTTP_502_BAD_GATEWAY: {"model": DeployFailureResponse},
        status.HTTP_504_GATEWAY_TIMEOUT: {"model": DeployFailureResponse},
    },
)
async def deploy(orchestrator: OrchestratorDep) -> Union[DeployResponse, JSONResponse]:
    """Create or update the Lambda stack and connect it to the upload bucket."""

    started = time.monotonic()
    try:
        result = await run_in_threadpool(orchestrator.deploy)
    except DeploymentFailure as exc:
        logger.error("Deployment failed at stage %s: %s", exc.stage, exc)
        observe_deploy("failure", exc.stage, time.monotonic() - started)
        return _failure_response(exc)
    except Exception as exc:
        logger.exception("Deployment failed unexpectedly")
        observe_deploy("failure", "unexpected", time.monotonic() - started)
        payload = DeployFailureResponse(error=str(exc) or "Deployment failed", stage=None)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload.model_dump()
        )

    observe_deploy("success", "complete", time.monotonic() - started)
    return DeployResponse.from_result(result)


@router.get(
    "/status",
    response_model=StackStatusResponse,
    responses={status.HTTP_502_BAD_GATEWAY: {"model": DeployFailureResponse}},
)
async def stack_status(orchestrator: OrchestratorDep) -> Union[StackStatusResponse, JSONResponse]:
    """Report the current stack status without changing anything."""

    try:
        snapshot = await run_in_threadpool(orchestrator.describe_stack)
    except DeploymentFailure as exc:
        return _failure_response(exc)
    return StackStatusResponse.from_snapshot(orchestrator.stack_name, snapshot)


@router.get("/stages", response_model=List[DeployStageResponse])
async def deploy_stages() -> List[DeployStageResponse]:
    """List the deploy stages in execution order."""

    return [DeployStageResponse.from_stage(stage) for stage in DeployPipeline.describe()]
