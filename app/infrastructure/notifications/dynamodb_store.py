"""DynamoDB-backed notification store for multi-instance deployments.

Table Schema:
    PK: id (String)
    Attributes: user_id, channel, title, content, metadata (JSON string),
               status, retry_count, created_at, updated_at, sent_at,
               next_attempt_at (ISO 8601 UTC strings)
    GSI: user_id-created_at-index (user_id + created_at)
    GSI: status-updated_at-index (status + updated_at)

Timestamps are stored as ISO strings with a fixed UTC offset, so the GSI
sort keys order chronologically.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from infrastructure.clients.aws import DynamoDBClient
from infrastructure.notifications.errors import StoreError
from infrastructure.notifications.models import (
    ChannelType,
    Notification,
    NotificationStatus,
    utc_now,
)
from infrastructure.notifications.store import validate_update_fields
from infrastructure.operations import OperationResult

logger = structlog.get_logger()

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"

_ATTRIBUTE_NAMES = {
    "status": "#status",
    "retry_count": "#retry_count",
    "sent_at": "#sent_at",
    "next_attempt_at": "#next_attempt_at",
    "updated_at": "#updated_at",
}


def _datetime_attr(value: Optional[datetime]) -> Optional[Dict[str, str]]:
    if value is None:
        return None
    return {"S": value.isoformat()}


def notification_to_item(notification: Notification) -> Dict[str, Any]:
    """Convert a Notification to a DynamoDB item."""
    item: Dict[str, Any] = {
        "id": {"S": notification.id},
        "user_id": {"S": notification.user_id},
        "channel": {"S": notification.channel.value},
        "title": {"S": notification.title},
        "content": {"S": notification.content},
        "metadata": {"S": json.dumps(notification.metadata, default=str)},
        "status": {"S": notification.status.value},
        "retry_count": {"N": str(notification.retry_count)},
        "created_at": {"S": notification.created_at.isoformat()},
        "updated_at": {"S": notification.updated_at.isoformat()},
    }
    for field in ("sent_at", "next_attempt_at"):
        attr = _datetime_attr(getattr(notification, field))
        if attr is not None:
            item[field] = attr
    return item


def item_to_notification(item: Dict[str, Any]) -> Notification:
    """Convert a DynamoDB item back to a Notification."""

    def _s(name: str) -> Optional[str]:
        attr = item.get(name)
        return attr.get("S") if isinstance(attr, dict) else None

    metadata_raw = _s("metadata")
    return Notification(
        id=_s("id"),
        user_id=_s("user_id"),
        channel=ChannelType(_s("channel")),
        title=_s("title"),
        content=_s("content"),
        metadata=json.loads(metadata_raw) if metadata_raw else {},
        status=NotificationStatus(_s("status")),
        retry_count=int(item.get("retry_count", {}).get("N", "0")),
        created_at=datetime.fromisoformat(_s("created_at")),
        updated_at=datetime.fromisoformat(_s("updated_at")),
        sent_at=datetime.fromisoformat(_s("sent_at")) if _s("sent_at") else None,
        next_attempt_at=(
            datetime.fromisoformat(_s("next_attempt_at"))
            if _s("next_attempt_at")
            else None
        ),
    )


class DynamoDBNotificationStore:
    """DynamoDB-backed notification store.

    Provides:
    - Shared state across multiple service instances
    - Create-only writes using a conditional put
    - Lookup by user and by status through GSIs

    Args:
        client: DynamoDBClient wrapper
        table_name: DynamoDB table name
        user_index_name: GSI keyed by user_id, sorted by created_at
        status_index_name: GSI keyed by status, sorted by updated_at
    """

    def __init__(
        self,
        client: DynamoDBClient,
        table_name: str,
        user_index_name: str = "user_id-created_at-index",
        status_index_name: str = "status-updated_at-index",
    ):
        self._client = client
        self.table_name = table_name
        self.user_index_name = user_index_name
        self.status_index_name = status_index_name

        logger.info(
            "dynamodb_notification_store_initialized",
            table_name=table_name,
            user_index=user_index_name,
            status_index=status_index_name,
        )

    def _raise_for(self, result: OperationResult, operation: str, **context) -> None:
        logger.error(
            "dynamodb_store_operation_failed",
            operation=operation,
            table_name=self.table_name,
            error=result.message,
            error_code=result.error_code,
            **context,
        )
        raise StoreError(
            f"DynamoDB {operation} failed: {result.message}", operation=operation
        )

    def ping(self) -> None:
        """Verify the table is reachable.

        Raises:
            StoreError: If the table cannot be described.
        """
        result = self._client.describe_table(self.table_name)
        if not result.is_success:
            self._raise_for(result, "describe_table")

    def create(self, notification: Notification) -> str:
        now = utc_now()
        record = notification.model_copy(
            update={
                "status": NotificationStatus.PENDING,
                "retry_count": 0,
                "sent_at": None,
                "next_attempt_at": None,
                "created_at": now,
                "updated_at": now,
            }
        )
        result = self._client.put_item(
            self.table_name,
            Item=notification_to_item(record),
            ConditionExpression="attribute_not_exists(id)",
        )
        if not result.is_success:
            if result.error_code == CONDITIONAL_CHECK_FAILED:
                raise StoreError(
                    f"Notification {record.id} already exists", operation="create"
                )
            self._raise_for(result, "create", notification_id=record.id)

        logger.debug(
            "notification_record_created",
            notification_id=record.id,
            user_id=record.user_id,
        )
        return record.id

    def find_by_id(self, notification_id: str) -> Optional[Notification]:
        result = self._client.get_item(
            self.table_name,
            Key={"id": {"S": notification_id}},
            ConsistentRead=True,
        )
        if not result.is_success:
            self._raise_for(result, "get_item", notification_id=notification_id)

        item = (result.data or {}).get("Item")
        return item_to_notification(item) if item else None

    def update_status(
        self, notification_id: str, **fields: Any
    ) -> Optional[Notification]:
        validate_update_fields(fields)
        fields["updated_at"] = utc_now()

        set_parts: List[str] = []
        remove_parts: List[str] = []
        names: Dict[str, str] = {"#id": "id"}
        values: Dict[str, Any] = {}

        for field, value in fields.items():
            placeholder = _ATTRIBUTE_NAMES[field]
            names[placeholder] = field
            if value is None:
                remove_parts.append(placeholder)
                continue
            if isinstance(value, NotificationStatus):
                values[f":{field}"] = {"S": value.value}
            elif isinstance(value, datetime):
                values[f":{field}"] = {"S": value.isoformat()}
            else:
                values[f":{field}"] = {"N": str(int(value))}
            set_parts.append(f"{placeholder} = :{field}")

        expression = "SET " + ", ".join(set_parts)
        if remove_parts:
            expression += " REMOVE " + ", ".join(remove_parts)

        result = self._client.update_item(
            self.table_name,
            Key={"id": {"S": notification_id}},
            UpdateExpression=expression,
            ConditionExpression="attribute_exists(#id)",
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values,
            ReturnValues="ALL_NEW",
        )
        if not result.is_success:
            if result.error_code == CONDITIONAL_CHECK_FAILED:
                return None
            self._raise_for(result, "update_item", notification_id=notification_id)

        attributes = (result.data or {}).get("Attributes")
        return item_to_notification(attributes) if attributes else None

    def find_by_user(self, user_id: str) -> List[Notification]:
        result = self._client.query(
            self.table_name,
            KeyConditionExpression="user_id = :user_id",
            IndexName=self.user_index_name,
            ExpressionAttributeValues={":user_id": {"S": user_id}},
            ScanIndexForward=False,
        )
        if not result.is_success:
            self._raise_for(result, "query", index=self.user_index_name)

        records = [item_to_notification(item) for item in result.data or []]
        # Sort again; pages may arrive out of order
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def find_by_status(self, status: NotificationStatus) -> List[Notification]:
        result = self._client.query(
            self.table_name,
            KeyConditionExpression="#status = :status",
            IndexName=self.status_index_name,
            ExpressionAttributeNames={"#status": "status"},
            ExpressionAttributeValues={":status": {"S": status.value}},
        )
        if not result.is_success:
            self._raise_for(result, "query", index=self.status_index_name)

        return [item_to_notification(item) for item in result.data or []]

    def close(self) -> None:
        logger.debug("notification_store_closed", backend="dynamodb")
