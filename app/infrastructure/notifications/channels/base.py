"""Notification channel abstract base class.

All channel implementations (email, SMS, in-app) implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import structlog

from infrastructure.notifications.gateways import ChannelGateway
from infrastructure.notifications.models import Notification
from infrastructure.operations import OperationResult

logger = structlog.get_logger()


class NotificationChannel(ABC):
    """Abstract base class for notification channels.

    Each channel renders a notification for one medium and hands it to its
    gateway:
    - EmailChannel: subject/body from a configured sender address
    - SMSChannel: text message to a phone number from metadata
    - InAppChannel: stored/pushed message for the user id

    send() never raises. A gateway failure or any unexpected exception is
    logged and reported as False so the caller can route to retry.

    Example Implementation:
        class PagerChannel(NotificationChannel):

            @property
            def channel_name(self) -> str:
                return "pager"

            def send(self, notification: Notification) -> bool:
                return self._deliver(
                    notification,
                    destination=notification.user_id,
                    payload={"text": notification.content},
                )
    """

    def __init__(self, gateway: ChannelGateway):
        self._gateway = gateway

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Channel identifier (email, sms, in_app)."""
        pass

    @abstractmethod
    def send(self, notification: Notification) -> bool:
        """Attempt one delivery of the notification.

        Returns:
            True if the provider accepted the delivery, False otherwise.
        """
        pass

    @property
    def gateway(self) -> ChannelGateway:
        return self._gateway

    def health_check(self) -> OperationResult:
        """Report the channel as usable with its configured gateway."""
        return OperationResult.success(
            message=f"{self.channel_name} channel ready",
            data={"channel": self.channel_name, "gateway": self._gateway.name},
        )

    def _deliver(
        self,
        notification: Notification,
        destination: str,
        payload: Dict[str, Any],
    ) -> bool:
        try:
            self._gateway.deliver(self.channel_name, destination, payload)
        except Exception as e:
            logger.warning(
                "channel_delivery_failed",
                channel=self.channel_name,
                notification_id=notification.id,
                user_id=notification.user_id,
                error=str(e),
                exc_info=True,
            )
            return False

        logger.info(
            "channel_delivery_succeeded",
            channel=self.channel_name,
            notification_id=notification.id,
            user_id=notification.user_id,
        )
        return True
