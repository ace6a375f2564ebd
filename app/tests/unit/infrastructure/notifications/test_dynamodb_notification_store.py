"""Unit tests for the DynamoDB notification store."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from infrastructure.clients.aws import DynamoDBClient
from infrastructure.notifications import (
    DynamoDBNotificationStore,
    NotificationStatus,
    StoreError,
)
from infrastructure.notifications.dynamodb_store import (
    item_to_notification,
    notification_to_item,
)
from infrastructure.notifications.models import utc_now
from infrastructure.operations import OperationResult, OperationStatus


@pytest.fixture
def mock_dynamodb_client():
    return MagicMock(spec=DynamoDBClient)


@pytest.fixture
def dynamodb_store(mock_dynamodb_client):
    return DynamoDBNotificationStore(
        client=mock_dynamodb_client,
        table_name="notifications-test",
    )


@pytest.mark.unit
class TestItemConversion:
    def test_optional_datetimes_omitted(self, notification_factory):
        item = notification_to_item(notification_factory())

        assert "sent_at" not in item
        assert "next_attempt_at" not in item
        assert item["retry_count"] == {"N": "0"}

    def test_item_round_trip_keeps_metadata(self, notification_factory):
        notification = notification_factory(
            metadata={"phoneNumber": "+15550001111", "tags": ["a"]},
            status=NotificationStatus.RETRYING,
            retry_count=2,
            next_attempt_at=utc_now() + timedelta(seconds=5),
        )

        assert item_to_notification(notification_to_item(notification)) == notification


@pytest.mark.unit
class TestDynamoDBNotificationStore:
    def test_create_uses_conditional_put(
        self, dynamodb_store, mock_dynamodb_client, notification_factory
    ):
        mock_dynamodb_client.put_item.return_value = OperationResult.success()
        notification = notification_factory(status=NotificationStatus.SENT)

        notification_id = dynamodb_store.create(notification)

        assert notification_id == notification.id
        kwargs = mock_dynamodb_client.put_item.call_args.kwargs
        assert kwargs["ConditionExpression"] == "attribute_not_exists(id)"
        assert kwargs["Item"]["status"] == {"S": "pending"}

    def test_create_duplicate_raises(
        self, dynamodb_store, mock_dynamodb_client, notification_factory
    ):
        mock_dynamodb_client.put_item.return_value = OperationResult.permanent_error(
            message="exists", error_code="ConditionalCheckFailedException"
        )

        with pytest.raises(StoreError, match="already exists"):
            dynamodb_store.create(notification_factory())

    def test_create_backend_failure_raises(
        self, dynamodb_store, mock_dynamodb_client, notification_factory
    ):
        mock_dynamodb_client.put_item.return_value = OperationResult.transient_error(
            message="timeout", error_code="CONNECTION_ERROR"
        )

        with pytest.raises(StoreError) as exc_info:
            dynamodb_store.create(notification_factory())

        assert exc_info.value.operation == "create"

    def test_find_by_id(
        self, dynamodb_store, mock_dynamodb_client, notification_factory
    ):
        notification = notification_factory()
        mock_dynamodb_client.get_item.return_value = OperationResult.success(
            data={"Item": notification_to_item(notification)}
        )

        found = dynamodb_store.find_by_id(notification.id)

        assert found == notification
        kwargs = mock_dynamodb_client.get_item.call_args.kwargs
        assert kwargs["Key"] == {"id": {"S": notification.id}}
        assert kwargs["ConsistentRead"] is True

    def test_find_by_id_missing(self, dynamodb_store, mock_dynamodb_client):
        mock_dynamodb_client.get_item.return_value = OperationResult.success(data={})

        assert dynamodb_store.find_by_id("missing") is None

    def test_update_status_builds_set_and_remove(
        self, dynamodb_store, mock_dynamodb_client, notification_factory
    ):
        sent = notification_factory(status=NotificationStatus.SENT, sent_at=utc_now())
        mock_dynamodb_client.update_item.return_value = OperationResult.success(
            data={"Attributes": notification_to_item(sent)}
        )

        updated = dynamodb_store.update_status(
            sent.id,
            status=NotificationStatus.SENT,
            sent_at=sent.sent_at,
            next_attempt_at=None,
        )

        assert updated == sent
        kwargs = mock_dynamodb_client.update_item.call_args.kwargs
        expression = kwargs["UpdateExpression"]
        assert expression.startswith("SET ")
        assert "#status = :status" in expression
        assert "#sent_at = :sent_at" in expression
        assert "#updated_at = :updated_at" in expression
        assert expression.endswith("REMOVE #next_attempt_at")
        assert kwargs["ConditionExpression"] == "attribute_exists(#id)"
        assert kwargs["ExpressionAttributeValues"][":status"] == {"S": "sent"}
        assert kwargs["ReturnValues"] == "ALL_NEW"

    def test_update_status_numbers(self, dynamodb_store, mock_dynamodb_client):
        mock_dynamodb_client.update_item.return_value = OperationResult.success(data={})

        dynamodb_store.update_status("abc", retry_count=3)

        values = mock_dynamodb_client.update_item.call_args.kwargs[
            "ExpressionAttributeValues"
        ]
        assert values[":retry_count"] == {"N": "3"}

    def test_update_missing_record_returns_none(
        self, dynamodb_store, mock_dynamodb_client
    ):
        mock_dynamodb_client.update_item.return_value = OperationResult.permanent_error(
            message="missing", error_code="ConditionalCheckFailedException"
        )

        assert dynamodb_store.update_status("missing", retry_count=1) is None

    def test_find_by_user_sorted_newest_first(
        self, dynamodb_store, mock_dynamodb_client, notification_factory
    ):
        now = utc_now()
        older = notification_factory(created_at=now - timedelta(minutes=5))
        newer = notification_factory(created_at=now)
        mock_dynamodb_client.query.return_value = OperationResult.success(
            data=[notification_to_item(older), notification_to_item(newer)]
        )

        records = dynamodb_store.find_by_user("user-1")

        assert [r.id for r in records] == [newer.id, older.id]
        kwargs = mock_dynamodb_client.query.call_args.kwargs
        assert kwargs["IndexName"] == "user_id-created_at-index"
        assert kwargs["ScanIndexForward"] is False

    def test_find_by_status_query_failure_raises(
        self, dynamodb_store, mock_dynamodb_client
    ):
        mock_dynamodb_client.query.return_value = OperationResult.error(
            OperationStatus.NOT_FOUND, message="no index"
        )

        with pytest.raises(StoreError):
            dynamodb_store.find_by_status(NotificationStatus.RETRYING)

    def test_ping(self, dynamodb_store, mock_dynamodb_client):
        mock_dynamodb_client.describe_table.return_value = OperationResult.success()

        dynamodb_store.ping()

        describe = mock_dynamodb_client.describe_table
        describe.assert_called_once_with("notifications-test")

    def test_ping_failure_raises(self, dynamodb_store, mock_dynamodb_client):
        mock_dynamodb_client.describe_table.return_value = OperationResult.error(
            OperationStatus.NOT_FOUND, message="Requested resource not found"
        )

        with pytest.raises(StoreError):
            dynamodb_store.ping()
