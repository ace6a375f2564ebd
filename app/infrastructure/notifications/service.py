"""Notification service for dependency injection.

Ingress use-cases: create a notification and hand it to the delivery
pipeline, and list a user's notifications. Used by the HTTP routes through
the delivery container.
"""

from typing import Any, Dict, List, Optional, TYPE_CHECKING

import structlog
from pydantic import ValidationError

from infrastructure.notifications.errors import EnqueueError, InvalidNotificationRequest
from infrastructure.notifications.models import ChannelType, Notification
from infrastructure.notifications.store import NotificationStore

if TYPE_CHECKING:
    from infrastructure.messaging import QueueBroker

logger = structlog.get_logger()

MISSING_FIELDS_MESSAGE = (
    "Missing required fields: userId, type, title, and content are required"
)
INVALID_TYPE_MESSAGE = (
    f"Invalid notification type. Must be one of: {', '.join(ChannelType.names())}"
)
MISSING_USER_ID_MESSAGE = "User ID is required"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class NotificationService:
    """Class-based notification service.

    Usage:
        from infrastructure.services import DeliveryContainerDep

        @router.post("/notifications")
        def create(container: DeliveryContainerDep, request: CreateNotificationRequest):
            return container.notification_service.create_notification(
                user_id=request.user_id,
                channel_type=request.type,
                title=request.title,
                content=request.content,
                metadata=request.metadata,
            )
    """

    def __init__(
        self,
        store: NotificationStore,
        broker: "QueueBroker",
        dispatch_routing_key: str = "dispatch",
    ):
        self._store = store
        self._broker = broker
        self._dispatch_routing_key = dispatch_routing_key

    def create_notification(
        self,
        user_id: Optional[str],
        channel_type: Any,
        title: Optional[str],
        content: Optional[str],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        """Create a PENDING notification and enqueue it for delivery.

        Args:
            user_id: Recipient user id
            channel_type: Channel name, matched case-insensitively
            title: Notification title
            content: Notification body
            metadata: Optional channel hints (e.g. phoneNumber)

        Returns:
            The stored notification

        Raises:
            InvalidNotificationRequest: Missing fields or unknown type
            EnqueueError: The dispatch queue did not accept the notification.
                The record stays PENDING with retry_count 0.
            StoreError: The record could not be persisted
        """
        if any(_is_blank(v) for v in (user_id, channel_type, title, content)):
            raise InvalidNotificationRequest(MISSING_FIELDS_MESSAGE)

        try:
            channel = ChannelType.parse(channel_type)
        except (ValueError, AttributeError):
            raise InvalidNotificationRequest(INVALID_TYPE_MESSAGE) from None

        if metadata is not None and not isinstance(metadata, dict):
            raise InvalidNotificationRequest("metadata must be an object")

        try:
            notification = Notification(
                user_id=user_id,
                channel=channel,
                title=title,
                content=content,
                metadata=metadata or {},
            )
        except ValidationError as e:
            raise InvalidNotificationRequest(MISSING_FIELDS_MESSAGE) from e
        notification_id = self._store.create(notification)
        record = self._store.find_by_id(notification_id) or notification

        if not self._broker.enqueue(self._dispatch_routing_key, record.to_message()):
            logger.error(
                "notification_enqueue_failed",
                notification_id=notification_id,
                routing_key=self._dispatch_routing_key,
            )
            raise EnqueueError(f"Failed to enqueue notification {notification_id}")

        logger.info(
            "notification_created",
            notification_id=notification_id,
            user_id=record.user_id,
            channel=record.channel.value,
        )
        return record

    def list_for_user(self, user_id: Optional[str]) -> List[Notification]:
        """Notifications for a user, newest first.

        Raises:
            InvalidNotificationRequest: If user_id is blank
        """
        if _is_blank(user_id):
            raise InvalidNotificationRequest(MISSING_USER_ID_MESSAGE)
        return self._store.find_by_user(user_id)

    def get_notification(self, notification_id: str) -> Optional[Notification]:
        return self._store.find_by_id(notification_id)
