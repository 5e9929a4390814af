"""Stack Lifecycle Controller.

Turns CloudFormation's asynchronous create/update/delete calls into one
blocking ``ensure_stack`` call with a deterministic outcome:

1. Probe the stack. Absent stacks are created. Stacks stuck in a
   rollback-terminal state are deleted first (and the deletion awaited), then
   created. Anything else is updated; "No updates are to be performed" is a
   successful no-op.
2. Poll every ``poll_interval`` seconds until the stack reaches a matching
   ``*_COMPLETE`` state, fails, or the attempt bound is hit.
3. Describe once more and read the declared outputs.

Calling it again when the stack is already current converges immediately.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from clari.deploy.clock import SYSTEM_CLOCK, Clock
from clari.deploy.errors import ConfigurationError, StackError, StackTimeoutError
from clari.deploy.prober import StackStatusProber
from clari.deploy.types import (
    DELETING_STATES,
    SUCCESS_STATES,
    UNRECOVERABLE_STATES,
    DeploymentOutputs,
    StackDescriptor,
    StackSnapshot,
    StackState,
)
from clari.telemetry import observe_stack_polls

logger = logging.getLogger("clari.deploy")


def is_no_updates_error(exc: ClientError) -> bool:
    """CloudFormation rejects no-op updates with a ValidationError."""

    error = exc.response.get("Error", {})
    return error.get("Code") == "ValidationError" and "No updates" in error.get(
        "Message", ""
    )


class StackLifecycleController:
    """Create, update or recreate the managed stack and wait for it to settle."""

    def __init__(
        self,
        cloudformation: Any,
        *,
        prober: StackStatusProber | None = None,
        clock: Clock = SYSTEM_CLOCK,
        poll_interval: float = 5.0,
        max_poll_attempts: int = 60,
        max_delete_attempts: int = 120,
        required_outputs: Sequence[str] = (),
    ) -> None:
        self._cloudformation = cloudformation
        self._prober = prober or StackStatusProber(cloudformation)
        self._clock = clock
        self._poll_interval = poll_interval
        self._max_poll_attempts = max_poll_attempts
        self._max_delete_attempts = max_delete_attempts
        self._required_outputs = tuple(required_outputs)

    def ensure_stack(self, descriptor: StackDescriptor) -> DeploymentOutputs:
        """Converge the stack to ``descriptor`` and return its outputs."""

        snapshot = self._prober.probe(descriptor.name)
        logger.info("Stack %s probed with status %s", descriptor.name, snapshot.status)

        if snapshot.state in UNRECOVERABLE_STATES:
            logger.warning(
                "Stack %s is in failed state (%s), deleting",
                descriptor.name,
                snapshot.status,
            )
            self._delete(descriptor.name)
            snapshot = StackSnapshot.absent()
        elif snapshot.state in DELETING_STATES:
            logger.info("Stack %s is being deleted, waiting", descriptor.name)
            self._wait_for_deletion(descriptor.name)
            snapshot = StackSnapshot.absent()

        if snapshot.exists:
            submitted = self._submit_update(descriptor)
        else:
            self._submit_create(descriptor)
            submitted = True

        if submitted:
            self._wait_for_completion(descriptor.name)

        return self._extract_outputs(descriptor.name)

    def _submit_create(self, descriptor: StackDescriptor) -> None:
        logger.info("Creating stack %s in %s", descriptor.name, descriptor.region)
        try:
            self._cloudformation.create_stack(**descriptor.to_request())
        except (BotoCoreError, ClientError) as exc:
            raise StackError(
                f"Stack creation was rejected: {exc}",
                reason="create_rejected",
            ) from exc

    def _submit_update(self, descriptor: StackDescriptor) -> bool:
        """Return False when there was nothing to update."""

        logger.info("Stack %s exists, updating", descriptor.name)
        try:
            self._cloudformation.update_stack(**descriptor.to_request())
        except ClientError as exc:
            if is_no_updates_error(exc):
                logger.info("No updates needed to stack %s", descriptor.name)
                return False
            raise StackError(
                f"Stack update was rejected: {exc}",
                reason="update_rejected",
            ) from exc
        except BotoCoreError as exc:
            raise StackError(
                f"Stack update was rejected: {exc}",
                reason="update_rejected",
            ) from exc
        return True

    def _delete(self, stack_name: str) -> None:
        try:
            self._cloudformation.delete_stack(StackName=stack_name)
        except (BotoCoreError, ClientError) as exc:
            raise StackError(
                f"Could not delete failed stack {stack_name}: {exc}",
                reason="delete_rejected",
            ) from exc
        self._wait_for_deletion(stack_name)

    def _wait_for_deletion(self, stack_name: str) -> None:
        for attempt in range(1, self._max_delete_attempts + 1):
            self._clock.sleep(self._poll_interval)
            snapshot = self._prober.probe(stack_name)
            logger.debug(
                "Delete poll %d for %s: %s", attempt, stack_name, snapshot.status
            )
            if not snapshot.exists or snapshot.state is StackState.DELETE_COMPLETE:
                logger.info("Stack %s deleted", stack_name)
                return
            if "FAILED" in snapshot.status:
                raise StackError(
                    f"Stack deletion failed with status: {snapshot.status}",
                    reason=snapshot.status,
                )
        raise StackTimeoutError(
            f"Stack deletion timed out after {self._max_delete_attempts} attempts"
        )

    def _wait_for_completion(self, stack_name: str) -> StackSnapshot:
        logger.info("Waiting for stack %s to be ready", stack_name)
        for attempt in range(1, self._max_poll_attempts + 1):
            self._clock.sleep(self._poll_interval)
            snapshot = self._prober.probe(stack_name)
            logger.debug("Poll %d for %s: %s", attempt, stack_name, snapshot.status)

            if snapshot.state in SUCCESS_STATES:
                observe_stack_polls(attempt)
                logger.info("Stack %s reached %s", stack_name, snapshot.status)
                return snapshot
            if snapshot.failed or snapshot.state is StackState.UPDATE_ROLLBACK_COMPLETE:
                observe_stack_polls(attempt)
                raise StackError(
                    f"Stack failed with status: {snapshot.status}",
                    reason=snapshot.status,
                )
            if not snapshot.exists:
                raise StackError(
                    f"Stack {stack_name} disappeared while waiting for completion",
                    reason=snapshot.status,
                )

        observe_stack_polls(self._max_poll_attempts)
        raise StackTimeoutError(
            f"Stack creation timed out after {self._max_poll_attempts} attempts"
        )

    def _extract_outputs(self, stack_name: str) -> DeploymentOutputs:
        snapshot = self._prober.probe(stack_name)
        if not snapshot.exists:
            raise StackError(
                f"Stack {stack_name} not found when reading outputs",
                reason=snapshot.status,
            )

        missing = [key for key in self._required_outputs if not snapshot.outputs.get(key)]
        if missing:
            raise ConfigurationError(
                f"Stack outputs missing required keys: {', '.join(missing)}",
                stage="stack",
            )
        return DeploymentOutputs(values=dict(snapshot.outputs))


__all__ = ["StackLifecycleController", "is_no_updates_error"]
