"""Exceptions raised by the notification delivery pipeline.

All pipeline exceptions inherit from NotificationError so that the HTTP
layer and the consumer wrapper can handle them in one place.
"""

from typing import Optional


class NotificationError(Exception):
    """Base exception for all notification pipeline errors.

    Example:
        try:
            service.create_notification(request)
        except NotificationError as e:
            logger.error("notification_error", error=str(e))
    """

    pass


class InvalidNotificationRequest(NotificationError):
    """Raised when an inbound request is missing fields or names an unknown type.

    The message is returned to the caller verbatim with HTTP 400.
    """

    pass


class StoreError(NotificationError):
    """Raised when the record store cannot complete an operation."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class BrokerError(NotificationError):
    """Base exception for message broker failures."""

    pass


class BrokerConnectionError(BrokerError):
    """Raised when the broker connection cannot be established."""

    pass


class EnqueueError(BrokerError):
    """Raised when a notification could not be placed on a queue.

    Example:
        >>> service.create_notification(request)
        Traceback (most recent call last):
        ...
        EnqueueError: Failed to enqueue notification 3f2a...
    """

    pass


class InvalidTransitionError(NotificationError):
    """Raised when a status change is not allowed by the state machine.

    Example:
        >>> tracker.mark_retrying(sent_id, retry_count=1, next_attempt_at=due)
        Traceback (most recent call last):
        ...
        InvalidTransitionError: Notification abc cannot move from sent to retrying
    """

    def __init__(self, notification_id: str, current, target):
        self.notification_id = notification_id
        self.current = current
        self.target = target
        super().__init__(
            f"Notification {notification_id} cannot move from "
            f"{getattr(current, 'value', current)} to "
            f"{getattr(target, 'value', target)}"
        )


class DeliveryError(NotificationError):
    """Raised by a channel gateway when the provider rejects a delivery."""

    pass


class RetryHandlingError(NotificationError):
    """Raised when the retry path itself fails.

    marked_failed tells whether the record could be moved to FAILED before
    raising. It is False when the store itself was unreachable.
    """

    def __init__(self, notification_id: str, message: str, marked_failed: bool = True):
        super().__init__(message)
        self.notification_id = notification_id
        self.marked_failed = marked_failed
