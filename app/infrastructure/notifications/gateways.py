"""Channel gateways.

A gateway is the transport a channel hands a rendered delivery to. Channels
decide what to send and where; gateways decide how. Swapping the gateway
(CHANNEL_GATEWAY) changes transport without touching channel or pipeline
code.

Gateways raise DeliveryError on failure. Channels convert that into a
False return so the dispatcher can route the notification to retry.
"""

import random
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

import structlog

from infrastructure.notifications.errors import DeliveryError

logger = structlog.get_logger()


class ChannelGateway(ABC):
    """Transport used by a notification channel."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Gateway identifier for logs and health checks."""
        pass

    @abstractmethod
    def deliver(self, channel: str, destination: str, payload: Dict[str, Any]) -> None:
        """Deliver one rendered message.

        Args:
            channel: Channel name (email, sms, in_app)
            destination: Channel-specific address (email, phone, user id)
            payload: Rendered message fields

        Raises:
            DeliveryError: If the provider rejects or fails the delivery.
        """
        pass


class SimulatedGateway(ChannelGateway):
    """Gateway that simulates a flaky provider.

    Sleeps for the configured latency, then fails with the configured
    probability. Used for demos and for exercising the retry path.

    Example:
        gateway = SimulatedGateway(latency_seconds=0.5, failure_rate=0.1)
        gateway.deliver("email", "user-1", {"subject": "Hi", "body": "..."})
    """

    def __init__(
        self,
        latency_seconds: float,
        failure_rate: float,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1]: {failure_rate}")
        if latency_seconds < 0:
            raise ValueError(f"latency_seconds cannot be negative: {latency_seconds}")
        self.latency_seconds = latency_seconds
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()
        self._sleep = sleep

    @property
    def name(self) -> str:
        return "simulated"

    def deliver(self, channel: str, destination: str, payload: Dict[str, Any]) -> None:
        if self.latency_seconds:
            self._sleep(self.latency_seconds)

        if self._rng.random() < self.failure_rate:
            raise DeliveryError(f"Simulated {channel} delivery failed")

        logger.debug(
            "simulated_delivery_completed",
            channel=channel,
            latency_seconds=self.latency_seconds,
        )


class LoggingGateway(ChannelGateway):
    """Gateway that logs the delivery and always succeeds."""

    @property
    def name(self) -> str:
        return "logging"

    def deliver(self, channel: str, destination: str, payload: Dict[str, Any]) -> None:
        logger.info(
            "delivery_logged",
            channel=channel,
            destination=destination,
            fields=sorted(payload.keys()),
        )
