"""Shared fakes for the deploy flow: AWS clients, clock and workspace."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ClientError

from clari.config.settings import AwsConfig, DeployConfig
from clari.deploy import build_deploy_orchestrator

STACK_NAME = "demo-stack"
BUCKET_NAME = "demo-bucket"
FUNCTION_ARN = "arn:svc:fn:demo"
FUNCTION_NAME = "demo-fn"
DEMO_OUTPUTS = {"functionArn": FUNCTION_ARN, "functionName": FUNCTION_NAME}


def client_error(code: str, message: str, operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeClock:
    """Records sleeps instead of blocking."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.current = start
        self.start = start
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds

    @property
    def elapsed(self) -> float:
        return self.current - self.start


class FakeCloudFormation:
    """Replays a scripted list of stack statuses, one per describe call.

    ``None`` in the script means the stack does not exist. The last entry is
    repeated once the script runs out.
    """

    def __init__(
        self,
        statuses: list[str | None],
        outputs: dict[str, str] | None = None,
        update_error: ClientError | None = None,
        create_error: ClientError | None = None,
    ) -> None:
        self._statuses = list(statuses)
        self.outputs = dict(DEMO_OUTPUTS if outputs is None else outputs)
        self.update_error = update_error
        self.create_error = create_error
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.describe_count = 0

    def _next_status(self) -> str | None:
        if len(self._statuses) > 1:
            return self._statuses.pop(0)
        return self._statuses[0]

    def describe_stacks(self, **kwargs: Any) -> dict[str, Any]:
        self.describe_count += 1
        status = self._next_status()
        if status is None:
            raise client_error(
                "ValidationError",
                f"Stack with id {kwargs['StackName']} does not exist",
                "DescribeStacks",
            )
        return {
            "Stacks": [
                {
                    "StackName": kwargs["StackName"],
                    "StackStatus": status,
                    "Outputs": [
                        {"OutputKey": key, "OutputValue": value}
                        for key, value in self.outputs.items()
                    ],
                }
            ]
        }

    def create_stack(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("create_stack", kwargs))
        if self.create_error is not None:
            raise self.create_error
        return {"StackId": f"arn:stack/{kwargs['StackName']}"}

    def update_stack(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("update_stack", kwargs))
        if self.update_error is not None:
            raise self.update_error
        return {"StackId": f"arn:stack/{kwargs['StackName']}"}

    def delete_stack(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("delete_stack", kwargs))
        return {}

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


class FakeLambda:
    """Keeps granted permissions and code uploads in memory."""

    def __init__(
        self,
        update_statuses: list[str] | None = None,
        update_error: ClientError | None = None,
        permission_error: ClientError | None = None,
    ) -> None:
        self._update_statuses = list(update_statuses or ["Successful"])
        self.update_error = update_error
        self.permission_error = permission_error
        self.code_updates: list[dict[str, Any]] = []
        self.permission_calls: list[dict[str, Any]] = []
        self._statements: set[str] = set()

    def update_function_code(self, **kwargs: Any) -> dict[str, Any]:
        if self.update_error is not None:
            raise self.update_error
        self.code_updates.append(kwargs)
        return {"FunctionName": kwargs["FunctionName"], "LastUpdateStatus": "InProgress"}

    def get_function_configuration(self, **kwargs: Any) -> dict[str, Any]:
        status = self._update_statuses.pop(0) if len(self._update_statuses) > 1 else self._update_statuses[0]
        config = {"FunctionName": kwargs["FunctionName"], "LastUpdateStatus": status}
        if status == "Failed":
            config["LastUpdateStatusReason"] = "Unzipped size must be smaller than 262144000 bytes"
        return config

    def add_permission(self, **kwargs: Any) -> dict[str, Any]:
        self.permission_calls.append(kwargs)
        if self.permission_error is not None:
            raise self.permission_error
        statement_id = kwargs["StatementId"]
        if statement_id in self._statements:
            raise client_error(
                "ResourceConflictException",
                f"The statement id ({statement_id}) provided already exists. Please choose another.",
                "AddPermission",
            )
        self._statements.add(statement_id)
        return {"Statement": "{}"}


class FakeS3:
    def __init__(self, notification_error: ClientError | None = None) -> None:
        self.notification_error = notification_error
        self.notifications: list[dict[str, Any]] = []

    def put_bucket_notification_configuration(self, **kwargs: Any) -> dict[str, Any]:
        if self.notification_error is not None:
            raise self.notification_error
        self.notifications.append(kwargs)
        return {}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def function_source(tmp_path: Path) -> Path:
    source = tmp_path / "lambda"
    (source / "lib").mkdir(parents=True)
    (source / "index.py").write_text("def handler(event, context):\n    return event\n")
    (source / "lib" / "helpers.py").write_text("VALUE = 1\n")
    return source


@pytest.fixture
def deploy_config(tmp_path: Path, function_source: Path) -> DeployConfig:
    template = tmp_path / "lambda-stack.yaml"
    template.write_text("AWSTemplateFormatVersion: '2010-09-09'\nResources: {}\n")
    return DeployConfig(
        stack_name=STACK_NAME,
        bucket_name=BUCKET_NAME,
        template_path=str(template),
        function_source_dir=str(function_source),
        build_dir=str(tmp_path / "build"),
        openai_api_key="sk-test",
        function_arn_output="functionArn",
        function_name_output="functionName",
    )


@pytest.fixture
def aws_config() -> AwsConfig:
    return AwsConfig(region="us-east-1", access_key_id=None, secret_access_key=None)


@pytest.fixture
def make_orchestrator(deploy_config: DeployConfig, aws_config: AwsConfig, clock: FakeClock):
    """Build an orchestrator around fake clients, optionally with config overrides."""

    def _make(cloudformation, lambda_client=None, s3_client=None, **overrides):
        config = deploy_config.model_copy(update=overrides) if overrides else deploy_config
        return build_deploy_orchestrator(
            config,
            aws_config,
            cloudformation=cloudformation,
            lambda_client=lambda_client or FakeLambda(),
            s3_client=s3_client or FakeS3(),
            clock=clock,
        )

    return _make
