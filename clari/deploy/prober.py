"""Stack Status Prober: read-only describe calls against CloudFormation."""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from clari.deploy.errors import StackError
from clari.deploy.types import StackSnapshot, StackState

logger = logging.getLogger("clari.deploy")


def is_missing_stack_error(exc: ClientError) -> bool:
    """CloudFormation reports unknown stacks as a ValidationError, not a 404."""

    error = exc.response.get("Error", {})
    return error.get("Code") == "ValidationError" and "does not exist" in error.get(
        "Message", ""
    )


class StackStatusProber:
    """Query the current status and outputs of a named stack."""

    def __init__(self, cloudformation: Any) -> None:
        self._cloudformation = cloudformation

    def probe(self, stack_name: str) -> StackSnapshot:
        try:
            response = self._cloudformation.describe_stacks(StackName=stack_name)
        except ClientError as exc:
            if is_missing_stack_error(exc):
                logger.debug("Stack %s does not exist", stack_name)
                return StackSnapshot.absent()
            raise StackError(
                f"Could not describe stack {stack_name}: {exc}",
                reason="describe_failed",
            ) from exc
        except BotoCoreError as exc:
            raise StackError(
                f"Could not describe stack {stack_name}: {exc}",
                reason="describe_failed",
            ) from exc

        stacks = response.get("Stacks") or []
        if not stacks:
            return StackSnapshot.absent()

        stack = stacks[0]
        status = stack.get("StackStatus") or ""
        outputs = {
            output["OutputKey"]: output.get("OutputValue", "")
            for output in stack.get("Outputs") or []
            if output.get("OutputKey")
        }
        return StackSnapshot(
            state=StackState.from_status(status),
            status=status,
            outputs=outputs,
            reason=stack.get("StackStatusReason"),
        )


__all__ = ["StackStatusProber", "is_missing_stack_error"]
