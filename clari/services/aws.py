"""Shared AWS helpers for service clients."""

from __future__ import annotations

from typing import Any

import boto3

from clari.config.settings import AwsConfig


def create_boto3_client(
    service_name: str,
    *,
    aws: AwsConfig,
    region_name: str | None = None,
) -> Any:
    """Instantiate a boto3 client from the given AWS settings.

    Explicit keys are only passed when both are configured; otherwise boto3
    falls back to its default credential chain.
    """

    client_kwargs: dict[str, Any] = {"region_name": region_name or aws.region}
    if aws.access_key_id and aws.secret_access_key:
        client_kwargs["aws_access_key_id"] = aws.access_key_id
        client_kwargs["aws_secret_access_key"] = aws.secret_access_key
    return boto3.client(service_name, **client_kwargs)


__all__ = ["create_boto3_client"]
