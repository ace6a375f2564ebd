"""Retry handler.

Handles the retry queue. Each message means "the last delivery attempt for
this notification failed". The handler decides, from the stored record,
whether another attempt is allowed; if so it persists RETRYING with a due
time and schedules the attempt on the backoff scheduler, so no consumer
thread sits out the interval.

Bound: a notification is attempted at most max_retries + 1 times. When the
next retry would exceed max_retries the record is marked FAILED with
retry_count == max_retries + 1.
"""

from datetime import timedelta
from enum import Enum
from functools import partial
from typing import Any

import structlog
from kombu.message import Message
from pydantic import ValidationError

from infrastructure.notifications.dispatcher import Dispatcher
from infrastructure.notifications.errors import EnqueueError, RetryHandlingError
from infrastructure.notifications.models import (
    Notification,
    NotificationStatus,
    utc_now,
)
from infrastructure.notifications.scheduler import Scheduler
from infrastructure.notifications.status import StatusTracker

logger = structlog.get_logger()


class RetryOutcome(Enum):
    """What the retry handler did with a notification."""

    SKIPPED_MISSING = "skipped_missing"
    SKIPPED_TERMINAL = "skipped_terminal"
    SCHEDULED = "scheduled"
    EXHAUSTED = "exhausted"


class RetryHandler:
    """Retry-queue handler with bounded, fixed-interval retries.

    Args:
        dispatcher: Makes the actual delivery attempt and routes failures
        tracker: Status transitions
        scheduler: Runs resume() once the backoff interval elapsed
        max_retries: Retries allowed after the first attempt (>= 1)
        retry_interval_ms: Fixed backoff between attempts

    Example:
        handler = RetryHandler(dispatcher, tracker, scheduler, max_retries=3)
        broker.consume(settings.broker.retry_queue, handler.handle_message, stop)
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        tracker: StatusTracker,
        scheduler: Scheduler,
        max_retries: int = 3,
        retry_interval_ms: int = 5000,
    ):
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1: {max_retries}")
        if retry_interval_ms < 0:
            raise ValueError(
                f"retry_interval_ms cannot be negative: {retry_interval_ms}"
            )
        self.dispatcher = dispatcher
        self.tracker = tracker
        self.scheduler = scheduler
        self.max_retries = max_retries
        self.retry_interval_ms = retry_interval_ms

    @property
    def retry_interval(self) -> timedelta:
        return timedelta(milliseconds=self.retry_interval_ms)

    def handle_message(self, body: Any, message: Message) -> None:
        """Process one retry-queue message.

        The message is acknowledged once the outcome is persisted. When the
        retry path fails and the record could be marked FAILED, the message
        is acknowledged before the error is re-raised; otherwise it is left
        for the consumer wrapper to requeue.
        """
        try:
            notification = Notification.from_message(body)
        except (ValidationError, ValueError, TypeError) as e:
            logger.error("retry_message_malformed", error=str(e))
            message.reject()
            return

        try:
            self.process(notification.id)
        except RetryHandlingError as e:
            if e.marked_failed:
                message.ack()
            raise

        message.ack()

    def process(self, notification_id: str) -> RetryOutcome:
        """Decide and persist the next step for a failed notification.

        Raises:
            RetryHandlingError: If the store or scheduler failed.
        """
        try:
            record = self.tracker.find(notification_id)
            if record is None:
                logger.warning("retry_record_missing", notification_id=notification_id)
                return RetryOutcome.SKIPPED_MISSING

            if record.status.is_terminal:
                logger.info(
                    "retry_skipped_terminal",
                    notification_id=notification_id,
                    status=record.status.value,
                )
                return RetryOutcome.SKIPPED_TERMINAL

            next_count = record.retry_count + 1
            if next_count > self.max_retries:
                self.tracker.mark_failed(notification_id, next_count)
                logger.warning(
                    "notification_retries_exhausted",
                    notification_id=notification_id,
                    retry_count=next_count,
                    max_retries=self.max_retries,
                )
                return RetryOutcome.EXHAUSTED

            due = utc_now() + self.retry_interval
            self.tracker.mark_retrying(notification_id, next_count, due)
            self.scheduler.schedule(
                notification_id,
                self.retry_interval.total_seconds(),
                partial(self.resume, notification_id),
            )
            return RetryOutcome.SCHEDULED

        except Exception as e:
            raise self._defensive_failure(
                notification_id, "retry_processing_failed", e
            ) from e

    def resume(self, notification_id: str) -> None:
        """Resubmit a RETRYING notification once its backoff elapsed.

        Runs on the scheduler. A record that disappeared or left RETRYING in
        the meantime is skipped.

        Raises:
            RetryHandlingError: If the attempt could not be made or re-routed.
        """
        try:
            record = self.tracker.find(notification_id)
            if record is None:
                logger.warning("resume_record_missing", notification_id=notification_id)
                return
            if record.status != NotificationStatus.RETRYING:
                logger.info(
                    "resume_skipped",
                    notification_id=notification_id,
                    status=record.status.value,
                )
                return

            logger.info(
                "retry_attempt_started",
                notification_id=notification_id,
                retry_count=record.retry_count,
            )
            if self.dispatcher.attempt(record):
                return

            if not self.dispatcher.route_to_retry(record):
                raise EnqueueError(
                    f"Failed to route notification {notification_id} to retry"
                )

        except Exception as e:
            raise self._defensive_failure(
                notification_id, "retry_resume_failed", e
            ) from e

    def recover_pending(self) -> int:
        """Reschedule every RETRYING record at its persisted due time.

        Called at startup so backoff state survives restarts. Records past
        their due time run immediately.

        Returns:
            Number of rescheduled notifications
        """
        records = self.tracker.find_retrying()
        now = utc_now()
        for record in records:
            due = record.next_attempt_at or now
            self.scheduler.schedule_at(record.id, due, partial(self.resume, record.id))

        logger.info("pending_retries_recovered", count=len(records))
        return len(records)

    def _defensive_failure(
        self, notification_id: str, event: str, cause: Exception
    ) -> RetryHandlingError:
        """Mark the record FAILED after a pipeline error.

        Returns the RetryHandlingError for the caller to raise.
        """
        logger.error(
            event,
            notification_id=notification_id,
            error=str(cause),
            exc_info=True,
        )
        try:
            self.tracker.mark_failed_defensively(notification_id, reason=str(cause))
        except Exception as mark_error:
            logger.error(
                "defensive_failure_not_recorded",
                notification_id=notification_id,
                error=str(mark_error),
            )
            return RetryHandlingError(
                notification_id,
                f"Retry handling failed for {notification_id}: {cause}",
                marked_failed=False,
            )

        return RetryHandlingError(
            notification_id,
            f"Retry handling failed for {notification_id}: {cause}",
        )
