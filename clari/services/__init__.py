"""Service layer helpers for external integrations."""

from .aws import create_boto3_client

__all__ = ["create_boto3_client"]
