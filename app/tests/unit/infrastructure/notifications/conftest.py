"""Test fixtures for notification pipeline tests."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import pytest

from infrastructure.notifications import (
    ChannelRegistry,
    ChannelType,
    Dispatcher,
    InMemoryNotificationStore,
    LoggingGateway,
    NotificationChannel,
    RetryHandler,
    StatusTracker,
)
from infrastructure.notifications.models import Notification


class FakeMessage:
    """Stand-in for kombu.message.Message recording the settlement."""

    def __init__(self, headers: Optional[Dict[str, Any]] = None):
        self.headers = headers or {}
        self.content_type = "application/json"
        self.state: Optional[str] = None

    @property
    def acknowledged(self) -> bool:
        return self.state is not None

    def ack(self) -> None:
        self.state = "ACK"

    def requeue(self) -> None:
        self.state = "REQUEUED"

    def reject(self, requeue: bool = False) -> None:
        self.state = "REJECTED"


class FakeBroker:
    """Records enqueued payloads; can be told to refuse them."""

    def __init__(self):
        self.published: List[Tuple[str, Dict[str, Any]]] = []
        self.accept = True
        self.is_connected = True

    def enqueue(self, routing_key: str, payload: Dict[str, Any]) -> bool:
        if not self.accept:
            return False
        self.published.append((routing_key, payload))
        return True

    def messages_for(self, routing_key: str) -> List[Dict[str, Any]]:
        return [p for key, p in self.published if key == routing_key]


class ManualScheduler:
    """Scheduler double that holds tasks until run_all() is called."""

    def __init__(self):
        self.tasks: Dict[str, Any] = {}
        self.delays: Dict[str, float] = {}
        self.due: Dict[str, datetime] = {}

    def schedule(self, key, delay_seconds, task):
        self.tasks[key] = task
        self.delays[key] = delay_seconds

    def schedule_at(self, key, due, task):
        self.tasks[key] = task
        self.due[key] = due

    def cancel(self, key):
        return self.tasks.pop(key, None) is not None

    def run_all(self) -> int:
        tasks, self.tasks = self.tasks, {}
        for task in tasks.values():
            task()
        return len(tasks)


class ScriptedChannel(NotificationChannel):
    """Channel whose send() results are scripted per call.

    Once the script is exhausted the last result repeats.
    """

    def __init__(self, results=(True,), name: str = "email"):
        super().__init__(LoggingGateway())
        self._results = list(results)
        self._name = name
        self.sent: List[Notification] = []

    @property
    def channel_name(self) -> str:
        return self._name

    def send(self, notification: Notification) -> bool:
        self.sent.append(notification)
        if len(self._results) > 1:
            result = self._results.pop(0)
        else:
            result = self._results[0]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_message_factory():
    def _factory(headers: Optional[Dict[str, Any]] = None) -> FakeMessage:
        return FakeMessage(headers)

    return _factory


@pytest.fixture
def fake_broker():
    return FakeBroker()


@pytest.fixture
def manual_scheduler():
    return ManualScheduler()


@pytest.fixture
def memory_store():
    return InMemoryNotificationStore()


@pytest.fixture
def tracker(memory_store):
    return StatusTracker(memory_store)


@pytest.fixture
def scripted_channel_factory():
    def _factory(results=(True,), name: str = "email") -> ScriptedChannel:
        return ScriptedChannel(results=results, name=name)

    return _factory


@pytest.fixture
def registry_factory():
    """Registry with the given channels keyed by type."""

    def _factory(channels: Dict[ChannelType, NotificationChannel]) -> ChannelRegistry:
        registry = ChannelRegistry()
        for channel_type, channel in channels.items():
            registry.register(channel_type, channel)
        return registry

    return _factory


@pytest.fixture
def pipeline_factory(
    memory_store, tracker, fake_broker, manual_scheduler, registry_factory
):
    """Dispatcher and retry handler over in-memory doubles.

    Example:
        dispatcher, retry_handler = pipeline_factory(channel, max_retries=2)
    """

    def _factory(
        channel: NotificationChannel,
        channel_type: ChannelType = ChannelType.EMAIL,
        max_retries: int = 3,
        retry_interval_ms: int = 5000,
    ) -> Tuple[Dispatcher, RetryHandler]:
        dispatcher = Dispatcher(
            registry=registry_factory({channel_type: channel}),
            tracker=tracker,
            broker=fake_broker,
            retry_routing_key="retry",
        )
        retry_handler = RetryHandler(
            dispatcher=dispatcher,
            tracker=tracker,
            scheduler=manual_scheduler,
            max_retries=max_retries,
            retry_interval_ms=retry_interval_ms,
        )
        return dispatcher, retry_handler

    return _factory


@pytest.fixture
def stored_notification_factory(memory_store, notification_factory):
    """Create a notification in the in-memory store and return the stored record."""

    def _factory(**kwargs: Any) -> Notification:
        notification_id = memory_store.create(notification_factory(**kwargs))
        return memory_store.find_by_id(notification_id)

    return _factory
