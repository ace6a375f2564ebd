"""In-app channel implementation."""

import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import Notification

logger = structlog.get_logger()


class InAppChannel(NotificationChannel):
    """In-app notification channel, addressed by user id."""

    @property
    def channel_name(self) -> str:
        return "in_app"

    def send(self, notification: Notification) -> bool:
        logger.info(
            "storing_in_app_notification",
            notification_id=notification.id,
            user_id=notification.user_id,
        )
        return self._deliver(
            notification,
            destination=notification.user_id,
            payload={
                "title": notification.title,
                "content": notification.content,
                "metadata": notification.metadata,
            },
        )
