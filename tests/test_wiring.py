"""Event wiring connector: permission grant and bucket notification."""

from __future__ import annotations

import pytest

from clari.deploy import EventWiringConnector, PermissionGrant, WiringError
from clari.deploy.wiring import function_name_from_arn
from conftest import BUCKET_NAME, FakeLambda, FakeS3, client_error

LAMBDA_ARN = "arn:aws:lambda:us-east-1:123456789012:function:clari-transcribe"


def test_connect_grants_permission_and_registers_notification(clock):
    lambda_client, s3_client = FakeLambda(), FakeS3()

    record = EventWiringConnector(lambda_client, s3_client, clock=clock).connect(
        BUCKET_NAME, LAMBDA_ARN
    )

    assert record.permission is PermissionGrant.GRANTED
    assert record.statement_id == f"s3-trigger-{int(clock.now() * 1000)}"
    assert lambda_client.permission_calls == [
        {
            "FunctionName": "clari-transcribe",
            "Principal": "s3.amazonaws.com",
            "Action": "lambda:InvokeFunction",
            "SourceArn": f"arn:aws:s3:::{BUCKET_NAME}",
            "StatementId": record.statement_id,
        }
    ]
    assert s3_client.notifications == [
        {
            "Bucket": BUCKET_NAME,
            "NotificationConfiguration": {
                "LambdaFunctionConfigurations": [
                    {"LambdaFunctionArn": LAMBDA_ARN, "Events": ["s3:ObjectCreated:*"]}
                ]
            },
        }
    ]


def test_reused_statement_id_is_reported_as_existing(clock):
    lambda_client, s3_client = FakeLambda(), FakeS3()
    connector = EventWiringConnector(lambda_client, s3_client, clock=clock)

    first = connector.connect(BUCKET_NAME, LAMBDA_ARN)
    second = connector.connect(BUCKET_NAME, LAMBDA_ARN)

    assert first.permission is PermissionGrant.GRANTED
    assert second.permission is PermissionGrant.ALREADY_EXISTS
    assert first.statement_id == second.statement_id
    assert len(s3_client.notifications) == 2


def test_later_connect_adds_a_fresh_statement(clock):
    lambda_client, s3_client = FakeLambda(), FakeS3()
    connector = EventWiringConnector(lambda_client, s3_client, clock=clock)

    first = connector.connect(BUCKET_NAME, LAMBDA_ARN)
    clock.sleep(1)
    second = connector.connect(BUCKET_NAME, LAMBDA_ARN)

    assert first.permission is PermissionGrant.GRANTED
    assert second.permission is PermissionGrant.GRANTED
    assert first.statement_id != second.statement_id
    assert len(s3_client.notifications) == 2


def test_other_permission_failures_are_logged_and_ignored(clock, caplog):
    lambda_client = FakeLambda(
        permission_error=client_error("AccessDeniedException", "not allowed", "AddPermission")
    )
    s3_client = FakeS3()

    with caplog.at_level("WARNING", logger="clari.deploy"):
        record = EventWiringConnector(lambda_client, s3_client, clock=clock).connect(
            BUCKET_NAME, LAMBDA_ARN
        )

    assert record.permission is PermissionGrant.FAILED
    assert "Could not add Lambda permission" in caplog.text
    assert len(s3_client.notifications) == 1


def test_notification_failure_is_fatal_and_keeps_permission(clock):
    lambda_client = FakeLambda()
    s3_client = FakeS3(
        notification_error=client_error(
            "InvalidArgument",
            "Unable to validate the following destination configurations",
            "PutBucketNotificationConfiguration",
        )
    )

    with pytest.raises(WiringError) as excinfo:
        EventWiringConnector(lambda_client, s3_client, clock=clock).connect(
            BUCKET_NAME, LAMBDA_ARN
        )

    assert excinfo.value.stage == "wiring"
    assert len(lambda_client.permission_calls) == 1
    assert s3_client.notifications == []


def test_key_prefix_and_events_are_applied_to_notification(clock):
    s3_client = FakeS3()
    connector = EventWiringConnector(
        FakeLambda(),
        s3_client,
        clock=clock,
        events=["s3:ObjectCreated:Put"],
        key_prefix="uploads/",
    )

    connector.connect(BUCKET_NAME, LAMBDA_ARN)

    configuration = s3_client.notifications[0]["NotificationConfiguration"][
        "LambdaFunctionConfigurations"
    ][0]
    assert configuration["Events"] == ["s3:ObjectCreated:Put"]
    assert configuration["Filter"] == {
        "Key": {"FilterRules": [{"Name": "prefix", "Value": "uploads/"}]}
    }


@pytest.mark.parametrize(
    ("arn", "expected"),
    [
        (LAMBDA_ARN, "clari-transcribe"),
        ("arn:aws:lambda:us-east-1:123456789012:function:fn:live", "fn:live"),
        ("arn:svc:fn:demo", "arn:svc:fn:demo"),
    ],
)
def test_function_name_from_arn(arn, expected):
    assert function_name_from_arn(arn) == expected
