"""Notification record storage.

The protocol-based design allows multiple storage backends (in-memory,
DynamoDB). The status tracker is the only writer of status fields; the
store only guarantees that each call is applied as a whole.
"""

import threading
from typing import Any, Dict, List, Optional, Protocol

from infrastructure.logging import get_module_logger
from infrastructure.notifications.errors import StoreError
from infrastructure.notifications.models import (
    Notification,
    NotificationStatus,
    utc_now,
)

logger = get_module_logger()

# Fields update_status() may change
UPDATABLE_FIELDS = frozenset({"status", "retry_count", "sent_at", "next_attempt_at"})


class NotificationStore(Protocol):
    """Storage interface for notification records.

    Methods:
        create: Persist a new record in PENDING and return its id
        find_by_id: Return the record or None
        update_status: Partially update status fields and refresh updated_at
        find_by_user: Records for a user, newest first
        find_by_status: Records currently in a status
        ping: Verify the backend is reachable
        close: Release backend resources
    """

    def create(self, notification: Notification) -> str:
        """Persist a new notification record.

        The record is stored as PENDING with retry_count 0 regardless of the
        values on the passed model.

        Raises:
            StoreError: If the id already exists or the backend fails.
        """
        ...

    def find_by_id(self, notification_id: str) -> Optional[Notification]:
        ...

    def update_status(
        self, notification_id: str, **fields: Any
    ) -> Optional[Notification]:
        """Apply a partial update.

        Args:
            notification_id: Record to update
            **fields: Any of status, retry_count, sent_at, next_attempt_at

        Returns:
            The updated record, or None if it does not exist.
        """
        ...

    def find_by_user(self, user_id: str) -> List[Notification]:
        ...

    def find_by_status(self, status: NotificationStatus) -> List[Notification]:
        ...

    def ping(self) -> None:
        """Verify the backend is reachable.

        Raises:
            StoreError: If the backend cannot be reached.
        """
        ...

    def close(self) -> None:
        ...


def validate_update_fields(fields: Dict[str, Any]) -> None:
    """Reject fields update_status() does not manage."""
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")


class InMemoryNotificationStore:
    """In-memory implementation of NotificationStore.

    Thread-safe dict store. Records are copied on the way in and out so
    callers never share mutable state with the store.

    Suitable for single-instance deployments, development and tests.
    """

    def __init__(self) -> None:
        self._records: Dict[str, Notification] = {}
        self._lock = threading.Lock()

    def create(self, notification: Notification) -> str:
        now = utc_now()
        record = notification.model_copy(
            update={
                "status": NotificationStatus.PENDING,
                "retry_count": 0,
                "sent_at": None,
                "next_attempt_at": None,
                "created_at": now,
                "updated_at": now,
            },
            deep=True,
        )
        with self._lock:
            if record.id in self._records:
                raise StoreError(
                    f"Notification {record.id} already exists", operation="create"
                )
            self._records[record.id] = record

        logger.debug(
            "notification_record_created",
            notification_id=record.id,
            user_id=record.user_id,
        )
        return record.id

    def find_by_id(self, notification_id: str) -> Optional[Notification]:
        with self._lock:
            record = self._records.get(notification_id)
            return record.model_copy(deep=True) if record else None

    def update_status(
        self, notification_id: str, **fields: Any
    ) -> Optional[Notification]:
        validate_update_fields(fields)
        with self._lock:
            record = self._records.get(notification_id)
            if record is None:
                return None
            updated = record.model_copy(update={**fields, "updated_at": utc_now()})
            self._records[notification_id] = updated
            return updated.model_copy(deep=True)

    def find_by_user(self, user_id: str) -> List[Notification]:
        with self._lock:
            records = [
                r.model_copy(deep=True)
                for r in self._records.values()
                if r.user_id == user_id
            ]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def find_by_status(self, status: NotificationStatus) -> List[Notification]:
        with self._lock:
            return [
                r.model_copy(deep=True)
                for r in self._records.values()
                if r.status == status
            ]

    def ping(self) -> None:
        return None

    def close(self) -> None:
        logger.debug("notification_store_closed", backend="memory")

    def count(self) -> int:
        """Return number of stored records."""
        with self._lock:
            return len(self._records)
