"""Notification delivery pipeline.

Records are created PENDING by the NotificationService and placed on the
dispatch queue. The Dispatcher makes one delivery attempt per message
through the channel registered for the notification's type; failures go to
the retry queue, where the RetryHandler applies the retry bound and
schedules the next attempt on the BackoffScheduler.

Usage:
    from infrastructure.notifications import (
        ChannelType,
        Dispatcher,
        InMemoryNotificationStore,
        StatusTracker,
        build_channel_registry,
    )

    store = InMemoryNotificationStore()
    tracker = StatusTracker(store)
    dispatcher = Dispatcher(build_channel_registry(settings.channels), tracker, broker)
"""

from infrastructure.notifications.models import (
    ChannelType,
    Notification,
    NotificationStatus,
)
from infrastructure.notifications.errors import (
    BrokerConnectionError,
    BrokerError,
    DeliveryError,
    EnqueueError,
    InvalidNotificationRequest,
    InvalidTransitionError,
    NotificationError,
    RetryHandlingError,
    StoreError,
)
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
from infrastructure.notifications.registry import (
    ChannelRegistry,
    build_channel_registry,
)
from infrastructure.notifications.store import (
    InMemoryNotificationStore,
    NotificationStore,
)
from infrastructure.notifications.dynamodb_store import DynamoDBNotificationStore
from infrastructure.notifications.factory import create_notification_store
from infrastructure.notifications.status import StatusTracker
from infrastructure.notifications.dispatcher import Dispatcher
from infrastructure.notifications.scheduler import BackoffScheduler
from infrastructure.notifications.retry import RetryHandler, RetryOutcome
from infrastructure.notifications.service import NotificationService

__all__ = [
    # Models
    "ChannelType",
    "Notification",
    "NotificationStatus",
    # Errors
    "BrokerConnectionError",
    "BrokerError",
    "DeliveryError",
    "EnqueueError",
    "InvalidNotificationRequest",
    "InvalidTransitionError",
    "NotificationError",
    "RetryHandlingError",
    "StoreError",
    # Channels
    "ChannelGateway",
    "ChannelRegistry",
    "EmailChannel",
    "InAppChannel",
    "LoggingGateway",
    "NotificationChannel",
    "SMSChannel",
    "SimulatedGateway",
    "build_channel_registry",
    # Storage
    "DynamoDBNotificationStore",
    "InMemoryNotificationStore",
    "NotificationStore",
    "create_notification_store",
    # Pipeline
    "BackoffScheduler",
    "Dispatcher",
    "NotificationService",
    "RetryHandler",
    "RetryOutcome",
    "StatusTracker",
]
