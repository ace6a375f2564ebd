"""Unit tests for the delivery container."""

from unittest.mock import MagicMock

import pytest

from infrastructure.messaging import QueueBroker
from infrastructure.notifications import (
    InMemoryNotificationStore,
    NotificationStatus,
    StoreError,
)
from infrastructure.services import DeliveryContainer


@pytest.fixture
def container(test_settings):
    container = DeliveryContainer.build(test_settings)
    yield container
    container.shutdown()


@pytest.mark.unit
class TestDeliveryContainer:
    def test_build_wires_components(self, container, test_settings):
        assert isinstance(container.store, InMemoryNotificationStore)
        assert isinstance(container.broker, QueueBroker)
        retry_queue = test_settings.broker.retry_queue
        assert container.dispatcher.retry_routing_key == retry_queue
        assert container.retry_handler.max_retries == test_settings.delivery.max_retries
        assert container.notification_service is not None

    def test_build_accepts_overrides(self, test_settings):
        store = InMemoryNotificationStore()
        broker = MagicMock()

        container = DeliveryContainer.build(test_settings, store=store, broker=broker)

        assert container.store is store
        assert container.broker is broker

    def test_connect(self, container):
        container.connect()

        assert container.broker.is_connected

    def test_connect_fails_when_store_unreachable(self, test_settings):
        store = MagicMock()
        store.ping.side_effect = StoreError("unreachable", operation="ping")
        broker = MagicMock()
        container = DeliveryContainer.build(test_settings, store=store, broker=broker)

        with pytest.raises(StoreError):
            container.connect()
        broker.connect.assert_not_called()

    def test_start_and_shutdown_workers(self, container):
        container.connect()

        container.start_workers()

        assert container.workers_started
        assert container.scheduler.is_running
        assert container.consumer_pool.is_running

        container.shutdown()

        assert not container.workers_started
        assert not container.scheduler.is_running
        assert not container.broker.is_connected

    def test_start_workers_recovers_pending_retries(
        self, container, notification_factory
    ):
        notification_id = container.store.create(notification_factory())
        container.store.update_status(
            notification_id, status=NotificationStatus.RETRYING, retry_count=1
        )
        container.connect()

        container.start_workers()

        container.shutdown()
        assert container.tracker.find(notification_id).status in (
            NotificationStatus.RETRYING,
            NotificationStatus.SENT,
        )

    def test_health(self, container):
        container.connect()

        health = container.health()

        assert health["broker"] is True
        assert health["workers"] is False
        assert health["pending_retries"] == 0
        assert health["channels"] == {"email": True, "sms": True, "in_app": True}
