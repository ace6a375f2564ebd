"""Fixtures for end-to-end delivery pipeline tests."""

import time

import pytest

from infrastructure.configuration import (
    ChannelSettings,
    DeliverySettings,
    Settings,
    StoreSettings,
)
from infrastructure.services import DeliveryContainer


@pytest.fixture
def pipeline_settings_factory(broker_settings_factory):
    """Settings for a running pipeline with instant simulated channels."""

    def _factory(failure_rate: float = 0.0, max_retries: int = 2) -> Settings:
        return Settings(
            PREFIX="integration",
            broker=broker_settings_factory(),
            store=StoreSettings(STORE_BACKEND="memory"),
            channels=ChannelSettings(
                CHANNEL_GATEWAY="simulated",
                EMAIL_LATENCY_MS=0,
                SMS_LATENCY_MS=0,
                IN_APP_LATENCY_MS=0,
                EMAIL_FAILURE_RATE=failure_rate,
                SMS_FAILURE_RATE=failure_rate,
                IN_APP_FAILURE_RATE=failure_rate,
            ),
            delivery=DeliverySettings(
                NOTIFICATION_MAX_RETRIES=max_retries,
                NOTIFICATION_RETRY_INTERVAL_MS=20,
                DISPATCH_CONCURRENCY=2,
                RETRY_CONCURRENCY=1,
                SCHEDULER_MAX_WORKERS=2,
                SHUTDOWN_TIMEOUT_SECONDS=5,
            ),
        )

    return _factory


@pytest.fixture
def running_container_factory():
    """Connected container with workers running; shut down after the test."""
    containers = []

    def _factory(settings: Settings) -> DeliveryContainer:
        container = DeliveryContainer.build(settings)
        container.connect()
        container.start_workers()
        containers.append(container)
        return container

    yield _factory

    for container in containers:
        container.shutdown()


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.02) -> bool:
    """Poll predicate until it returns truthy or the timeout elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return False


@pytest.fixture
def wait_until():
    return wait_for
