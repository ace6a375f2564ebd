"""Email channel implementation."""

import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.gateways import ChannelGateway
from infrastructure.notifications.models import Notification

logger = structlog.get_logger()


class EmailChannel(NotificationChannel):
    """Email notification channel.

    The title becomes the subject. The recipient address comes from
    metadata["email"] when present, otherwise the user id is handed to the
    gateway for resolution.
    """

    def __init__(self, gateway: ChannelGateway, sender: str, api_key: str = ""):
        super().__init__(gateway)
        self._sender = sender
        self._api_key = api_key
        logger.info("initialized_email_channel", sender=sender, gateway=gateway.name)

    @property
    def channel_name(self) -> str:
        return "email"

    def send(self, notification: Notification) -> bool:
        destination = notification.metadata.get("email") or notification.user_id
        logger.info(
            "sending_email",
            notification_id=notification.id,
            user_id=notification.user_id,
            sender=self._sender,
            subject=notification.title,
        )
        return self._deliver(
            notification,
            destination=destination,
            payload={
                "from": self._sender,
                "to": destination,
                "subject": notification.title,
                "body": notification.content,
            },
        )
