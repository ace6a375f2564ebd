"""Unit tests for the DynamoDB client wrapper."""

from unittest.mock import patch

import pytest

from infrastructure.clients.aws import DynamoDBClient, SessionProvider
from infrastructure.operations import OperationResult


@pytest.fixture
def mock_execute():
    with patch("infrastructure.clients.aws.dynamodb.execute_aws_api_call") as execute:
        execute.return_value = OperationResult.success(data={})
        yield execute


@pytest.fixture
def dynamodb_client():
    provider = SessionProvider(
        region="ca-central-1", endpoint_url="http://localhost:8000"
    )
    return DynamoDBClient(session_provider=provider, max_retries=2)


@pytest.mark.unit
class TestDynamoDBClient:
    def test_get_item_passes_session_config(self, dynamodb_client, mock_execute):
        dynamodb_client.get_item("notifications", Key={"id": {"S": "abc"}})

        args, kwargs = mock_execute.call_args
        assert args == ("dynamodb", "get_item")
        assert kwargs["TableName"] == "notifications"
        assert kwargs["session_config"] == {"region_name": "ca-central-1"}
        assert kwargs["client_config"] == {
            "region_name": "ca-central-1",
            "endpoint_url": "http://localhost:8000",
        }
        assert kwargs["role_arn"] is None
        assert kwargs["max_retries"] == 2

    def test_query_paginates_items(self, dynamodb_client, mock_execute):
        dynamodb_client.query(
            "notifications",
            KeyConditionExpression="user_id = :u",
            IndexName="user_id-created_at-index",
        )

        kwargs = mock_execute.call_args.kwargs
        assert kwargs["force_paginate"] is True
        assert kwargs["keys"] == ["Items"]
        assert kwargs["IndexName"] == "user_id-created_at-index"

    def test_describe_table_does_not_retry(self, dynamodb_client, mock_execute):
        dynamodb_client.describe_table("notifications")

        assert mock_execute.call_args.kwargs["max_retries"] == 0

    def test_healthcheck(self, dynamodb_client, mock_execute):
        result = dynamodb_client.healthcheck()

        assert result.is_success
        assert mock_execute.call_args.args == ("dynamodb", "list_tables")


@pytest.mark.unit
def test_session_provider_role_override():
    provider = SessionProvider(region="ca-central-1", role_arn="arn:default")

    assert provider.build_client_kwargs()["role_arn"] == "arn:default"
    assert provider.build_client_kwargs("arn:other")["role_arn"] == "arn:other"
    assert provider.build_client_kwargs()["client_config"] == {
        "region_name": "ca-central-1"
    }
