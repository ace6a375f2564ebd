"""Fixtures for HTTP API tests."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from infrastructure.services import DeliveryContainer, get_settings
from server.server import create_app


@pytest.fixture
def api_container(test_settings):
    """Connected container without running workers."""
    container = DeliveryContainer.build(test_settings)
    container.connect()
    yield container
    container.shutdown()


@pytest.fixture
def client(api_container, test_settings):
    app = create_app(
        container=api_container, settings=test_settings, start_workers=False
    )
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def failing_broker_client(test_settings):
    broker = MagicMock()
    broker.is_connected = True
    broker.enqueue.return_value = False
    container = DeliveryContainer.build(test_settings, broker=broker)
    app = create_app(container=container, settings=test_settings, start_workers=False)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
