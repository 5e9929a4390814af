"""Deploy Orchestrator: the single idempotent deploy operation.

Sequence: configuration -> template -> ensure_stack -> package -> update_code
-> connect. The first failing stage aborts the rest. Nothing is rolled back;
re-invoking deploy converges the stack, function and bucket wiring to the
desired state from wherever the last attempt stopped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from clari.config.settings import AwsConfig, DeployConfig
from clari.deploy.clock import SYSTEM_CLOCK, Clock
from clari.deploy.code_updater import FunctionCodeUpdater
from clari.deploy.errors import ConfigurationError
from clari.deploy.lifecycle import StackLifecycleController
from clari.deploy.packager import ArtifactPackager
from clari.deploy.prober import StackStatusProber
from clari.deploy.types import DeployResult, StackDescriptor, StackSnapshot
from clari.deploy.wiring import EventWiringConnector
from clari.services.aws import create_boto3_client

logger = logging.getLogger("clari.deploy")


def load_template(template_path: Path | str) -> str:
    path = Path(template_path)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Could not read template file: {path}") from exc


class DeployOrchestrator:
    """Compose the deploy stages around one resolved configuration."""

    def __init__(
        self,
        config: DeployConfig,
        *,
        region: str,
        lifecycle: StackLifecycleController,
        prober: StackStatusProber,
        packager: ArtifactPackager,
        code_updater: FunctionCodeUpdater,
        connector: EventWiringConnector,
    ) -> None:
        self._config = config
        self._region = region
        self._lifecycle = lifecycle
        self._prober = prober
        self._packager = packager
        self._code_updater = code_updater
        self._connector = connector

    @property
    def stack_name(self) -> str:
        return self._config.stack_name

    def describe_stack(self) -> StackSnapshot:
        """Current stack status, without side effects."""

        return self._prober.probe(self._config.stack_name)

    def build_descriptor(self, bucket_name: str, template_body: str) -> StackDescriptor:
        return StackDescriptor(
            name=self._config.stack_name,
            region=self._region,
            template_body=template_body,
            parameters=(
                ("ExistingBucketName", bucket_name),
                ("OpenAIApiKey", self._config.openai_api_key.get_secret_value()),
            ),
            capabilities=tuple(self._config.capabilities),
        )

    def deploy(self) -> DeployResult:
        bucket_name = self._config.bucket_name
        if not bucket_name:
            raise ConfigurationError(
                "AWS_S3_BUCKET_NAME environment variable is required",
                status_code=400,
            )
        template_body = load_template(self._config.template_path)

        logger.info("Deploying Lambda function stack %s", self._config.stack_name)
        outputs = self._lifecycle.ensure_stack(
            self.build_descriptor(bucket_name, template_body)
        )
        function_arn = outputs.get(self._config.function_arn_output) or ""
        function_name = outputs.get(self._config.function_name_output) or ""
        logger.info("Lambda ready: %s", function_name)

        logger.info("Packaging Lambda code")
        bundle = self._packager.package(self._config.function_source_dir)
        self._code_updater.update_code(function_name, bundle)

        logger.info("Connecting S3 bucket %s to Lambda", bucket_name)
        wiring = self._connector.connect(bucket_name, function_arn)

        return DeployResult(
            outputs=outputs,
            bucket_name=bucket_name,
            function_arn=function_arn,
            function_name=function_name,
            wiring=wiring,
        )


def build_deploy_orchestrator(
    config: DeployConfig,
    aws: AwsConfig,
    *,
    cloudformation: Any | None = None,
    lambda_client: Any | None = None,
    s3_client: Any | None = None,
    clock: Clock = SYSTEM_CLOCK,
) -> DeployOrchestrator:
    """Wire every stage from configuration; clients default to boto3."""

    cloudformation = cloudformation or create_boto3_client("cloudformation", aws=aws)
    lambda_client = lambda_client or create_boto3_client("lambda", aws=aws)
    s3_client = s3_client or create_boto3_client("s3", aws=aws)

    prober = StackStatusProber(cloudformation)
    return DeployOrchestrator(
        config,
        region=aws.region,
        prober=prober,
        lifecycle=StackLifecycleController(
            cloudformation,
            prober=prober,
            clock=clock,
            poll_interval=config.poll_interval_seconds,
            max_poll_attempts=config.max_poll_attempts,
            max_delete_attempts=config.max_delete_attempts,
            required_outputs=(config.function_arn_output, config.function_name_output),
        ),
        packager=ArtifactPackager(config.build_dir, config.artifact_name),
        code_updater=FunctionCodeUpdater(
            lambda_client,
            clock=clock,
            wait_for_update=config.wait_for_code_update,
            poll_interval=config.poll_interval_seconds,
            max_attempts=config.code_update_max_attempts,
        ),
        connector=EventWiringConnector(
            lambda_client,
            s3_client,
            clock=clock,
            events=config.notification_events,
            key_prefix=config.notification_prefix,
        ),
    )


__all__ = ["DeployOrchestrator", "build_deploy_orchestrator", "load_template"]
