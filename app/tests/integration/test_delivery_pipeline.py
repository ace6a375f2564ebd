"""End-to-end tests of the delivery pipeline on the in-memory kombu transport."""

import pytest
from fastapi.testclient import TestClient

from infrastructure.notifications import NotificationStatus
from server.server import create_app


@pytest.mark.integration
def test_notification_delivered(
    pipeline_settings_factory, running_container_factory, wait_until
):
    container = running_container_factory(pipeline_settings_factory())

    notification = container.notification_service.create_notification(
        user_id="user-1", channel_type="sms", title="Code", content="123456"
    )

    assert wait_until(
        lambda: container.tracker.find(notification.id).status
        == NotificationStatus.SENT
    )
    stored = container.tracker.find(notification.id)
    assert stored.retry_count == 0
    assert stored.sent_at is not None


@pytest.mark.integration
def test_always_failing_channel_ends_failed(
    pipeline_settings_factory, running_container_factory, wait_until
):
    container = running_container_factory(
        pipeline_settings_factory(failure_rate=1.0, max_retries=2)
    )

    notification = container.notification_service.create_notification(
        user_id="user-1", channel_type="email", title="Hi", content="Hello"
    )

    assert wait_until(
        lambda: container.tracker.find(notification.id).status
        == NotificationStatus.FAILED
    )
    stored = container.tracker.find(notification.id)
    assert stored.retry_count == 3
    assert stored.sent_at is None
    assert stored.next_attempt_at is None


@pytest.mark.integration
def test_http_round_trip(
    pipeline_settings_factory, running_container_factory, wait_until
):
    settings = pipeline_settings_factory()
    container = running_container_factory(settings)
    app = create_app(container=container, settings=settings, start_workers=False)

    with TestClient(app) as client:
        created = client.post(
            "/notifications",
            json={
                "userId": "user-9",
                "type": "IN_APP",
                "title": "Welcome",
                "content": "Hello",
            },
        )
        assert created.status_code == 201
        notification_id = created.json()["data"]["id"]

        def delivered():
            data = client.get("/users/user-9/notifications").json()["data"]
            return data and data[0]["status"] == "sent"

        assert wait_until(delivered)
        listed = client.get("/users/user-9/notifications").json()["data"]

    assert listed[0]["id"] == notification_id
    assert listed[0]["sentAt"]
