"""Channel registry.

Maps each ChannelType to the channel that delivers it. The dispatcher looks
channels up here instead of branching on the type.
"""

import random
import threading
from typing import Dict, Optional, TYPE_CHECKING

import structlog

from infrastructure.notifications.channels import (
    EmailChannel,
    InAppChannel,
    NotificationChannel,
    SMSChannel,
)
from infrastructure.notifications.gateways import (
    ChannelGateway,
    LoggingGateway,
    SimulatedGateway,
)
from infrastructure.notifications.models import ChannelType

if TYPE_CHECKING:
    from infrastructure.configuration import ChannelSettings

logger = structlog.get_logger()


class ChannelRegistry:
    """Registry of notification channels keyed by ChannelType.

    Example:
        registry = ChannelRegistry()
        registry.register(ChannelType.EMAIL, EmailChannel(gateway, sender="a@b.c"))

        channel = registry.get(notification.channel)
        if channel is None:
            ...
    """

    def __init__(self):
        self._channels: Dict[ChannelType, NotificationChannel] = {}
        self._lock = threading.Lock()

    def register(self, channel_type: ChannelType, channel: NotificationChannel) -> None:
        """Register (or replace) the channel for a type."""
        with self._lock:
            replaced = channel_type in self._channels
            self._channels[channel_type] = channel
        logger.info(
            "channel_registered",
            channel_type=channel_type.value,
            channel=channel.channel_name,
            replaced=replaced,
        )

    def get(self, channel_type: ChannelType) -> Optional[NotificationChannel]:
        with self._lock:
            return self._channels.get(channel_type)

    def registered_types(self) -> list[ChannelType]:
        with self._lock:
            return list(self._channels.keys())

    def health_check(self) -> Dict[str, bool]:
        """Check health of all registered channels.

        Returns:
            Dict mapping channel type value to health status (True=healthy)
        """
        with self._lock:
            channels = dict(self._channels)

        health_status: Dict[str, bool] = {}
        for channel_type, channel in channels.items():
            try:
                health_status[channel_type.value] = channel.health_check().is_success
            except Exception as e:
                logger.error(
                    "channel_health_check_failed",
                    channel_type=channel_type.value,
                    error=str(e),
                    exc_info=True,
                )
                health_status[channel_type.value] = False
        return health_status


def _make_gateway(
    settings: "ChannelSettings",
    latency_ms: int,
    failure_rate: float,
    rng: Optional[random.Random],
) -> ChannelGateway:
    if settings.gateway == "logging":
        return LoggingGateway()
    return SimulatedGateway(
        latency_seconds=latency_ms / 1000.0,
        failure_rate=failure_rate,
        rng=rng,
    )


def build_channel_registry(
    settings: "ChannelSettings",
    rng: Optional[random.Random] = None,
) -> ChannelRegistry:
    """Build the registry with the email, SMS and in-app channels.

    Args:
        settings: Channel settings (gateway kind, senders, credentials)
        rng: Optional random source shared by simulated gateways

    Returns:
        ChannelRegistry with one channel per enabled type
    """
    registry = ChannelRegistry()

    registry.register(
        ChannelType.EMAIL,
        EmailChannel(
            gateway=_make_gateway(
                settings, settings.email_latency_ms, settings.email_failure_rate, rng
            ),
            sender=settings.EMAIL_FROM,
            api_key=settings.EMAIL_API_KEY,
        ),
    )
    registry.register(
        ChannelType.SMS,
        SMSChannel(
            gateway=_make_gateway(
                settings, settings.sms_latency_ms, settings.sms_failure_rate, rng
            ),
            sender=settings.SMS_FROM,
            default_phone=settings.SMS_DEFAULT_PHONE,
            account_sid=settings.SMS_ACCOUNT_SID,
            auth_token=settings.SMS_AUTH_TOKEN,
        ),
    )
    if settings.IN_APP_ENABLED:
        registry.register(
            ChannelType.IN_APP,
            InAppChannel(
                gateway=_make_gateway(
                    settings,
                    settings.in_app_latency_ms,
                    settings.in_app_failure_rate,
                    rng,
                ),
            ),
        )

    return registry
