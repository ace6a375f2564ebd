"""Unit tests for the FastAPI application factory and lifespan."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from infrastructure.services import DeliveryContainer
from server.lifespan import _list_configs
from server.server import create_app


@pytest.fixture
def mock_container():
    container = MagicMock(spec=DeliveryContainer)
    container.notification_service = MagicMock()
    return container


@pytest.mark.unit
class TestCreateApp:
    def test_unknown_route_envelope(self, mock_container, test_settings):
        app = create_app(
            container=mock_container, settings=test_settings, start_workers=False
        )
        with TestClient(app) as client:
            response = client.delete("/nowhere")

        assert response.status_code == 404
        assert response.json() == {
            "status": "error",
            "message": "Cannot DELETE /nowhere",
        }

    def test_unhandled_error_envelope(self, mock_container, test_settings):
        mock_container.notification_service.list_for_user.side_effect = RuntimeError(
            "unexpected"
        )
        app = create_app(
            container=mock_container, settings=test_settings, start_workers=False
        )
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/users/user-1/notifications")

        assert response.status_code == 500
        assert response.json()["status"] == "error"

    def test_correlation_id_echoed(self, mock_container, test_settings):
        app = create_app(
            container=mock_container, settings=test_settings, start_workers=False
        )
        with TestClient(app) as client:
            response = client.get("/health", headers={"X-Correlation-ID": "req-7"})

        assert response.headers["X-Correlation-ID"] == "req-7"

    def test_correlation_id_generated(self, mock_container, test_settings):
        app = create_app(
            container=mock_container, settings=test_settings, start_workers=False
        )
        with TestClient(app) as client:
            response = client.get("/health")

        assert response.headers["X-Correlation-ID"]


@pytest.mark.unit
class TestLifespan:
    def test_starts_and_stops_workers(self, mock_container, test_settings):
        app = create_app(container=mock_container, settings=test_settings)

        with TestClient(app):
            mock_container.start_workers.assert_called_once()
            mock_container.shutdown.assert_not_called()

        mock_container.shutdown.assert_called_once()

    def test_workers_disabled(self, mock_container, test_settings):
        app = create_app(
            container=mock_container, settings=test_settings, start_workers=False
        )

        with TestClient(app):
            pass

        mock_container.start_workers.assert_not_called()
        mock_container.shutdown.assert_called_once()

    def test_builds_container_when_missing(self, mock_container, test_settings):
        app = create_app(settings=test_settings, start_workers=False)

        with patch(
            "server.lifespan.DeliveryContainer.build", return_value=mock_container
        ) as build:
            with TestClient(app):
                assert app.state.container is mock_container

        build.assert_called_once_with(test_settings)
        mock_container.connect.assert_called_once()


@pytest.mark.unit
def test_list_configs_logs_section_keys_only(test_settings):
    logger = MagicMock()

    _list_configs(test_settings, logger)

    base_call = logger.info.call_args_list[0]
    assert base_call.args == ("configuration_initialized",)
    assert base_call.kwargs["base_settings"]["GIT_SHA"] == "abc123"
    assert "broker" not in base_call.kwargs["base_settings"]

    sections = {
        c.kwargs["config_setting"]: c.kwargs["keys"]
        for c in logger.info.call_args_list[1:]
    }
    assert set(sections) == {"aws", "broker", "channels", "delivery", "server", "store"}
    assert "max_retries" in sections["delivery"]
