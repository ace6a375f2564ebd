"""SMS channel implementation."""

from typing import Optional

import structlog

from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.gateways import ChannelGateway
from infrastructure.notifications.models import Notification

logger = structlog.get_logger()

# SMS provider message length limit
MAX_SMS_LENGTH = 1600


class SMSChannel(NotificationChannel):
    """SMS notification channel.

    Sends to metadata["phoneNumber"], falling back to the configured default
    destination when the notification carries none.
    """

    def __init__(
        self,
        gateway: ChannelGateway,
        sender: str,
        default_phone: str = "+15551234567",
        account_sid: str = "",
        auth_token: str = "",
    ):
        super().__init__(gateway)
        self._sender = sender
        self._default_phone = default_phone
        self._account_sid = account_sid
        self._auth_token = auth_token
        logger.info("initialized_sms_channel", sender=sender, gateway=gateway.name)

    @property
    def channel_name(self) -> str:
        return "sms"

    def resolve_phone_number(self, notification: Notification) -> str:
        """Destination phone number for the notification."""
        phone: Optional[str] = notification.metadata.get("phoneNumber")
        if isinstance(phone, str) and phone.strip():
            return phone.strip()
        return self._default_phone

    def send(self, notification: Notification) -> bool:
        phone_number = self.resolve_phone_number(notification)

        message = f"{notification.title}: {notification.content}"
        if len(message) > MAX_SMS_LENGTH:
            logger.warning(
                "sms_message_truncated",
                notification_id=notification.id,
                original_length=len(message),
            )
            message = message[: MAX_SMS_LENGTH - 3] + "..."

        logger.info(
            "sending_sms",
            notification_id=notification.id,
            user_id=notification.user_id,
            sender=self._sender,
            phone_number=phone_number,
        )
        return self._deliver(
            notification,
            destination=phone_number,
            payload={"from": self._sender, "to": phone_number, "message": message},
        )
