"""Factory for creating notification stores based on configuration."""

from typing import Optional, TYPE_CHECKING

import structlog

from infrastructure.clients.aws import DynamoDBClient, SessionProvider
from infrastructure.notifications.dynamodb_store import DynamoDBNotificationStore
from infrastructure.notifications.store import (
    InMemoryNotificationStore,
    NotificationStore,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = structlog.get_logger()


def create_notification_store(
    settings: "Settings", backend: Optional[str] = None
) -> NotificationStore:
    """Create the notification store selected by configuration.

    Args:
        settings: Application settings
        backend: Optional backend override (memory, dynamodb).
            If None, uses settings.store.backend

    Returns:
        NotificationStore implementation

    Raises:
        ValueError: If an unknown backend is specified

    Examples:
        >>> store = create_notification_store(settings)
        >>> store = create_notification_store(settings, backend="memory")
    """
    backend = backend or settings.store.backend

    if backend == "memory":
        logger.info("creating_in_memory_notification_store")
        return InMemoryNotificationStore()

    if backend == "dynamodb":
        logger.info(
            "creating_dynamodb_notification_store",
            table_name=settings.store.table_name,
            endpoint_url=settings.store.uri or None,
        )
        session_provider = SessionProvider(
            region=settings.aws.AWS_REGION,
            endpoint_url=settings.store.uri or None,
            role_arn=settings.aws.ROLE_ARN,
        )
        return DynamoDBNotificationStore(
            client=DynamoDBClient(session_provider=session_provider),
            table_name=settings.store.table_name,
            user_index_name=settings.store.user_index_name,
            status_index_name=settings.store.status_index_name,
        )

    raise ValueError(
        f"Unknown notification store backend: {backend}. Supported: memory, dynamodb"
    )
