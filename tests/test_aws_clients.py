"""boto3 client construction from explicit AWS settings."""

from __future__ import annotations

import boto3

from clari.config.settings import AwsConfig
from clari.deploy import build_deploy_orchestrator
from clari.services import create_boto3_client


def _capture(monkeypatch) -> list[tuple[str, dict]]:
    created: list[tuple[str, dict]] = []

    def fake_client(service_name, **kwargs):
        created.append((service_name, kwargs))
        return object()

    monkeypatch.setattr(boto3, "client", fake_client)
    return created


def test_client_uses_given_region_and_keys(monkeypatch):
    created = _capture(monkeypatch)
    aws = AwsConfig(region="eu-west-1", access_key_id="AKIDEXAMPLE", secret_access_key="secret")

    create_boto3_client("lambda", aws=aws)

    assert created == [
        (
            "lambda",
            {
                "region_name": "eu-west-1",
                "aws_access_key_id": "AKIDEXAMPLE",
                "aws_secret_access_key": "secret",
            },
        )
    ]


def test_client_without_keys_defers_to_default_chain(monkeypatch):
    created = _capture(monkeypatch)
    aws = AwsConfig(region="us-east-2", access_key_id=None, secret_access_key=None)

    create_boto3_client("s3", aws=aws, region_name="ap-south-1")

    assert created == [("s3", {"region_name": "ap-south-1"})]


def test_orchestrator_factory_builds_clients_from_its_arguments(monkeypatch, deploy_config):
    created = _capture(monkeypatch)
    aws = AwsConfig(region="ca-central-1", access_key_id=None, secret_access_key=None)

    build_deploy_orchestrator(deploy_config, aws)

    assert [service for service, _ in created] == ["cloudformation", "lambda", "s3"]
    assert {kwargs["region_name"] for _, kwargs in created} == {"ca-central-1"}
