"""Event Wiring Connector: let the upload bucket invoke the function.

Two ordered steps run on every deploy:

1. ``add_permission`` for ``s3.amazonaws.com`` scoped to the bucket ARN. A
   fresh statement id is used each time; a conflict means the grant is already
   there. Any other failure is logged and the connect continues, since a
   broken grant shows up later as invocation failures rather than here.
2. ``put_bucket_notification_configuration`` pointing ObjectCreated events at
   the function. This REPLACES the bucket's whole notification configuration,
   so any other subscription on the bucket is dropped. Failure is fatal.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from clari.deploy.clock import SYSTEM_CLOCK, Clock
from clari.deploy.errors import WiringError
from clari.deploy.types import PermissionGrant, WiringRecord

logger = logging.getLogger("clari.deploy")

S3_PRINCIPAL = "s3.amazonaws.com"
INVOKE_ACTION = "lambda:InvokeFunction"
PERMISSION_CONFLICT_CODE = "ResourceConflictException"


def bucket_arn(bucket_name: str) -> str:
    return f"arn:aws:s3:::{bucket_name}"


def function_name_from_arn(function_arn: str) -> str:
    """``arn:aws:lambda:<region>:<account>:function:<name>`` -> ``<name>``."""

    if ":function:" in function_arn:
        return function_arn.split(":function:", 1)[1]
    return function_arn


class EventWiringConnector:
    """Grant invoke permission and register the bucket notification."""

    def __init__(
        self,
        lambda_client: Any,
        s3_client: Any,
        *,
        clock: Clock = SYSTEM_CLOCK,
        events: Sequence[str] = ("s3:ObjectCreated:*",),
        key_prefix: str | None = None,
    ) -> None:
        self._lambda = lambda_client
        self._s3 = s3_client
        self._clock = clock
        self._events = tuple(events)
        self._key_prefix = key_prefix

    def connect(self, bucket_name: str, function_arn: str) -> WiringRecord:
        statement_id = f"s3-trigger-{int(self._clock.now() * 1000)}"
        permission = self.grant_invoke_permission(bucket_name, function_arn, statement_id)
        self.register_notification(bucket_name, function_arn)
        logger.info("S3 bucket %s connected to %s", bucket_name, function_arn)
        return WiringRecord(
            bucket_name=bucket_name,
            function_arn=function_arn,
            events=self._events,
            statement_id=statement_id,
            permission=permission,
        )

    def grant_invoke_permission(
        self,
        bucket_name: str,
        function_arn: str,
        statement_id: str,
    ) -> PermissionGrant:
        try:
            self._lambda.add_permission(
                FunctionName=function_name_from_arn(function_arn),
                Principal=S3_PRINCIPAL,
                Action=INVOKE_ACTION,
                SourceArn=bucket_arn(bucket_name),
                StatementId=statement_id,
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == PERMISSION_CONFLICT_CODE:
                logger.info("Lambda permission for %s already exists", bucket_name)
                return PermissionGrant.ALREADY_EXISTS
            logger.warning("Could not add Lambda permission: %s", exc)
            return PermissionGrant.FAILED
        except BotoCoreError as exc:
            logger.warning("Could not add Lambda permission: %s", exc)
            return PermissionGrant.FAILED

        logger.info("Lambda permission added for S3 bucket %s", bucket_name)
        return PermissionGrant.GRANTED

    def register_notification(self, bucket_name: str, function_arn: str) -> None:
        configuration: dict[str, Any] = {
            "LambdaFunctionArn": function_arn,
            "Events": list(self._events),
        }
        if self._key_prefix:
            configuration["Filter"] = {
                "Key": {"FilterRules": [{"Name": "prefix", "Value": self._key_prefix}]}
            }

        try:
            self._s3.put_bucket_notification_configuration(
                Bucket=bucket_name,
                NotificationConfiguration={
                    "LambdaFunctionConfigurations": [configuration],
                },
            )
        except (BotoCoreError, ClientError) as exc:
            raise WiringError(
                f"Failed to register S3 notification on {bucket_name}: {exc}"
            ) from exc


__all__ = [
    "EventWiringConnector",
    "bucket_arn",
    "function_name_from_arn",
]
