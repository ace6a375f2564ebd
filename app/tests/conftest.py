"""Shared fixtures for notification service tests."""

import uuid
from typing import Any, Dict, Optional

import pytest

from infrastructure.configuration import (
    BrokerSettings,
    ChannelSettings,
    DeliverySettings,
    Settings,
    StoreSettings,
)
from infrastructure.notifications import ChannelType, Notification


@pytest.fixture
def notification_factory():
    """Factory for creating Notification instances.

    Example:
        notification = notification_factory(channel=ChannelType.SMS)
        with_phone = notification_factory(metadata={"phoneNumber": "+15550001111"})
    """

    def _factory(
        user_id: str = "user-1",
        channel: ChannelType = ChannelType.EMAIL,
        title: str = "Order shipped",
        content: str = "Your order is on its way",
        metadata: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> Notification:
        return Notification(
            user_id=user_id,
            channel=channel,
            title=title,
            content=content,
            metadata=metadata or {},
            **kwargs,
        )

    return _factory


@pytest.fixture
def broker_settings_factory():
    """Factory for BrokerSettings on the in-memory kombu transport.

    kombu's memory transport keeps queues in process-wide state, so every
    call gets unique exchange and queue names.
    """

    def _factory(**overrides: Any) -> BrokerSettings:
        suffix = uuid.uuid4().hex[:8]
        values: Dict[str, Any] = {
            "BROKER_URL": "memory://",
            "BROKER_EXCHANGE": f"notifications-{suffix}",
            "BROKER_DISPATCH_QUEUE": f"dispatch-{suffix}",
            "BROKER_RETRY_QUEUE": f"retry-{suffix}",
            "BROKER_CONNECT_MAX_RETRIES": 1,
        }
        values.update(overrides)
        return BrokerSettings(**values)

    return _factory


@pytest.fixture
def settings_factory(broker_settings_factory):
    """Factory for Settings wired to in-memory backends and a logging gateway."""

    def _factory(
        max_retries: int = 3,
        retry_interval_ms: int = 10,
        gateway: str = "logging",
        recover_on_startup: bool = True,
        prefix: str = "test",
    ) -> Settings:
        return Settings(
            PREFIX=prefix,
            GIT_SHA="abc123",
            broker=broker_settings_factory(),
            store=StoreSettings(STORE_BACKEND="memory"),
            channels=ChannelSettings(CHANNEL_GATEWAY=gateway),
            delivery=DeliverySettings(
                NOTIFICATION_MAX_RETRIES=max_retries,
                NOTIFICATION_RETRY_INTERVAL_MS=retry_interval_ms,
                DISPATCH_CONCURRENCY=1,
                RETRY_CONCURRENCY=1,
                SCHEDULER_MAX_WORKERS=2,
                SHUTDOWN_TIMEOUT_SECONDS=5,
                RECOVER_ON_STARTUP=recover_on_startup,
            ),
        )

    return _factory


@pytest.fixture
def test_settings(settings_factory):
    return settings_factory()
