"""Function Code Updater: replace the deployed Lambda code with a new bundle.

The replacement itself is a single `update_function_code` call that is never
retried. Lambda applies the new code asynchronously, so by default the updater
then polls `LastUpdateStatus` on the injected clock, bounded by
`max_attempts`, until it reads `Successful` or `Failed`. This is the only
suspending loop in the flow besides the stack polls. The permission grant
that follows would otherwise hit a `ResourceConflictException` from the
in-flight update and misread it as an existing statement. Pass
`wait_for_update=False` to return right after the upload.
"""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from clari.deploy.clock import SYSTEM_CLOCK, Clock
from clari.deploy.errors import DeployError
from clari.deploy.types import ArtifactBundle

logger = logging.getLogger("clari.deploy")


class FunctionCodeUpdater:
    """Push an archive into an existing function; failures are not retried."""

    def __init__(
        self,
        lambda_client: Any,
        *,
        clock: Clock = SYSTEM_CLOCK,
        wait_for_update: bool = True,
        poll_interval: float = 5.0,
        max_attempts: int = 60,
    ) -> None:
        self._lambda = lambda_client
        self._clock = clock
        self._wait_for_update = wait_for_update
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts

    def update_code(self, function_name: str, bundle: ArtifactBundle) -> None:
        try:
            zip_bytes = bundle.read_bytes()
        except OSError as exc:
            raise DeployError(f"Could not read packaged archive {bundle.path}: {exc}") from exc

        try:
            self._lambda.update_function_code(FunctionName=function_name, ZipFile=zip_bytes)
        except (BotoCoreError, ClientError) as exc:
            raise DeployError(f"Failed to update Lambda code for {function_name}: {exc}") from exc
        logger.info("Lambda code updated for %s (%d bytes)", function_name, len(zip_bytes))

        if self._wait_for_update:
            self._wait_until_updated(function_name)

    def _wait_until_updated(self, function_name: str) -> None:
        """Block until LastUpdateStatus leaves InProgress."""

        for attempt in range(1, self._max_attempts + 1):
            try:
                configuration = self._lambda.get_function_configuration(
                    FunctionName=function_name
                )
            except (BotoCoreError, ClientError) as exc:
                raise DeployError(
                    f"Could not read Lambda state for {function_name}: {exc}"
                ) from exc

            status = configuration.get("LastUpdateStatus") or "Successful"
            if status == "Successful":
                return
            if status == "Failed":
                reason = configuration.get("LastUpdateStatusReason") or "unknown reason"
                raise DeployError(f"Lambda code update failed for {function_name}: {reason}")

            logger.debug("Code update poll %d for %s: %s", attempt, function_name, status)
            self._clock.sleep(self._poll_interval)

        raise DeployError(
            f"Lambda code update for {function_name} did not finish "
            f"after {self._max_attempts} attempts",
            status_code=504,
        )


__all__ = ["FunctionCodeUpdater"]
