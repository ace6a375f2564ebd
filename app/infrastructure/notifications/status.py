"""Notification status state machine.

StatusTracker is the only component that changes a record's status. Each
operation reads the record, checks the transition, then writes. Stores are
not assumed to offer compare-and-swap, so two writers racing on one record
can both pass the check; the broker delivers each message to one consumer
and a record has at most one queue entry, which keeps that window closed in
practice.
"""

from datetime import datetime
from typing import Dict, FrozenSet, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.errors import InvalidTransitionError, StoreError
from infrastructure.notifications.models import (
    Notification,
    NotificationStatus,
    utc_now,
)
from infrastructure.notifications.store import NotificationStore

logger = get_module_logger()

ALLOWED_TRANSITIONS: Dict[NotificationStatus, FrozenSet[NotificationStatus]] = {
    NotificationStatus.PENDING: frozenset(
        {NotificationStatus.SENT, NotificationStatus.RETRYING}
    ),
    NotificationStatus.RETRYING: frozenset(
        {
            NotificationStatus.SENT,
            NotificationStatus.RETRYING,
            NotificationStatus.FAILED,
        }
    ),
    NotificationStatus.SENT: frozenset(),
    NotificationStatus.FAILED: frozenset(),
}


def can_transition(current: NotificationStatus, target: NotificationStatus) -> bool:
    """Check whether current -> target is a legal status transition."""
    return target in ALLOWED_TRANSITIONS[current]


class StatusTracker:
    """Applies status transitions to notification records.

    Operations:
        mark_sent: PENDING/RETRYING -> SENT, sets sent_at. Idempotent.
        mark_retrying: PENDING/RETRYING -> RETRYING with retry_count and due time
        mark_failed: RETRYING -> FAILED once the retry bound is exceeded
        mark_failed_defensively: any non-terminal -> FAILED after a pipeline error

    All operations raise StoreError when the record does not exist. The first
    three check the transition table and raise InvalidTransitionError on an
    illegal move. mark_failed_defensively bypasses the table: it is the retry
    handler's way out when the store or scheduler fails mid-retry, and the
    only route by which a PENDING record can become FAILED.
    """

    def __init__(self, store: NotificationStore):
        self._store = store

    def _load(self, notification_id: str) -> Notification:
        record = self._store.find_by_id(notification_id)
        if record is None:
            raise StoreError(
                f"Notification {notification_id} not found", operation="find_by_id"
            )
        return record

    def _write(self, notification_id: str, **fields) -> Notification:
        updated = self._store.update_status(notification_id, **fields)
        if updated is None:
            raise StoreError(
                f"Notification {notification_id} disappeared during update",
                operation="update_status",
            )
        return updated

    def _check(
        self, record: Notification, target: NotificationStatus
    ) -> None:
        if not can_transition(record.status, target):
            raise InvalidTransitionError(record.id, record.status, target)

    def find(self, notification_id: str) -> Optional[Notification]:
        """Current stored record, or None."""
        return self._store.find_by_id(notification_id)

    def find_retrying(self) -> List[Notification]:
        """Records waiting for a scheduled retry."""
        return self._store.find_by_status(NotificationStatus.RETRYING)

    def mark_sent(self, notification_id: str) -> Notification:
        """Mark a notification as delivered.

        A record that is already SENT is returned unchanged, so a redelivered
        dispatch message is safe.
        """
        record = self._load(notification_id)
        if record.status == NotificationStatus.SENT:
            logger.info("notification_already_sent", notification_id=notification_id)
            return record

        self._check(record, NotificationStatus.SENT)
        updated = self._write(
            notification_id,
            status=NotificationStatus.SENT,
            sent_at=utc_now(),
            next_attempt_at=None,
        )
        logger.info(
            "notification_sent",
            notification_id=notification_id,
            channel=updated.channel.value,
            retry_count=updated.retry_count,
        )
        return updated

    def mark_retrying(
        self,
        notification_id: str,
        retry_count: int,
        next_attempt_at: datetime,
    ) -> Notification:
        """Record a scheduled retry.

        Args:
            notification_id: Record to update
            retry_count: New retry count, exactly one more than the stored value
            next_attempt_at: When the retry is due
        """
        record = self._load(notification_id)
        self._check(record, NotificationStatus.RETRYING)
        if retry_count != record.retry_count + 1:
            raise ValueError(
                f"retry_count must advance by one: stored {record.retry_count}, "
                f"got {retry_count}"
            )

        updated = self._write(
            notification_id,
            status=NotificationStatus.RETRYING,
            retry_count=retry_count,
            next_attempt_at=next_attempt_at,
        )
        logger.info(
            "notification_retry_scheduled",
            notification_id=notification_id,
            retry_count=retry_count,
            next_attempt_at=next_attempt_at.isoformat(),
        )
        return updated

    def mark_failed(self, notification_id: str, retry_count: int) -> Notification:
        """Mark a notification FAILED after exhausting its retries.

        Args:
            notification_id: Record to update
            retry_count: Final retry count (max_retries + 1)
        """
        record = self._load(notification_id)
        self._check(record, NotificationStatus.FAILED)
        if retry_count < record.retry_count:
            raise ValueError(
                f"retry_count cannot decrease: stored {record.retry_count}, "
                f"got {retry_count}"
            )

        updated = self._write(
            notification_id,
            status=NotificationStatus.FAILED,
            retry_count=retry_count,
            next_attempt_at=None,
        )
        logger.warning(
            "notification_failed",
            notification_id=notification_id,
            retry_count=retry_count,
        )
        return updated

    def mark_failed_defensively(
        self, notification_id: str, reason: str
    ) -> Optional[Notification]:
        """Move a non-terminal record to FAILED after a pipeline error.

        Terminal records are left untouched and None is returned. retry_count
        is not changed.
        """
        record = self._load(notification_id)
        if record.status.is_terminal:
            logger.info(
                "defensive_failure_skipped",
                notification_id=notification_id,
                status=record.status.value,
            )
            return None

        updated = self._write(
            notification_id,
            status=NotificationStatus.FAILED,
            next_attempt_at=None,
        )
        logger.error(
            "notification_failed_defensively",
            notification_id=notification_id,
            previous_status=record.status.value,
            retry_count=record.retry_count,
            reason=reason,
        )
        return updated
