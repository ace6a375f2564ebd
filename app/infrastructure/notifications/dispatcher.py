"""Notification dispatcher.

Handles the dispatch queue: one delivery attempt per message. A failed
attempt is routed to the retry queue; the dispatch message is acknowledged
only once that enqueue succeeded, so a notification never ends up without a
queue entry.

Usage Example:
    dispatcher = Dispatcher(
        registry=build_channel_registry(settings.channels),
        tracker=StatusTracker(store),
        broker=broker,
        retry_routing_key=settings.broker.retry_queue,
    )

    broker.consume(settings.broker.dispatch_queue, dispatcher.handle_message, stop)
"""

from typing import Any, TYPE_CHECKING

import structlog
from kombu.message import Message
from pydantic import ValidationError

from infrastructure.notifications.errors import InvalidTransitionError
from infrastructure.notifications.models import Notification
from infrastructure.notifications.registry import ChannelRegistry
from infrastructure.notifications.status import StatusTracker

if TYPE_CHECKING:
    from infrastructure.messaging import QueueBroker

logger = structlog.get_logger()


class Dispatcher:
    """Dispatch-queue handler.

    Attributes:
        registry: Channel lookup by ChannelType
        tracker: Status transitions
        broker: Queue broker used to route failures to retry
        retry_routing_key: Routing key of the retry queue
    """

    def __init__(
        self,
        registry: ChannelRegistry,
        tracker: StatusTracker,
        broker: "QueueBroker",
        retry_routing_key: str = "retry",
    ):
        self.registry = registry
        self.tracker = tracker
        self.broker = broker
        self.retry_routing_key = retry_routing_key

    def attempt(self, notification: Notification) -> bool:
        """Make one delivery attempt and mark SENT on success.

        Store errors raised while marking SENT propagate.

        Returns:
            True if the channel delivered the notification
        """
        channel = self.registry.get(notification.channel)
        if channel is None:
            logger.error(
                "channel_not_registered",
                notification_id=notification.id,
                channel=notification.channel.value,
                available_channels=[c.value for c in self.registry.registered_types()],
            )
            return False

        try:
            delivered = channel.send(notification)
        except Exception as e:
            logger.error(
                "channel_send_raised",
                notification_id=notification.id,
                channel=notification.channel.value,
                error=str(e),
                exc_info=True,
            )
            delivered = False

        if not delivered:
            logger.info(
                "delivery_attempt_failed",
                notification_id=notification.id,
                channel=notification.channel.value,
                retry_count=notification.retry_count,
            )
            return False

        self.tracker.mark_sent(notification.id)
        return True

    def route_to_retry(self, notification: Notification) -> bool:
        """Put the notification on the retry queue."""
        queued = self.broker.enqueue(self.retry_routing_key, notification.to_message())
        if queued:
            logger.info(
                "notification_routed_to_retry",
                notification_id=notification.id,
                retry_count=notification.retry_count,
            )
        else:
            logger.error(
                "notification_retry_enqueue_failed",
                notification_id=notification.id,
            )
        return queued

    def handle_message(self, body: Any, message: Message) -> None:
        """Process one dispatch-queue message.

        - malformed payload or unknown record: reject (dropped, not requeued)
        - record already SENT or FAILED (redelivery): ack
        - delivered: ack
        - failed and routed to retry: ack
        - failed and retry enqueue failed: requeue for another attempt
        """
        try:
            notification = Notification.from_message(body)
        except (ValidationError, ValueError, TypeError) as e:
            logger.error("dispatch_message_malformed", error=str(e))
            message.reject()
            return

        record = self.tracker.find(notification.id)
        if record is None:
            logger.error("dispatch_record_missing", notification_id=notification.id)
            message.reject()
            return
        if record.status.is_terminal:
            logger.info(
                "dispatch_skipped_terminal",
                notification_id=record.id,
                status=record.status.value,
            )
            message.ack()
            return

        try:
            delivered = self.attempt(record)
        except InvalidTransitionError as e:
            logger.warning(
                "dispatch_transition_rejected", notification_id=record.id, error=str(e)
            )
            message.ack()
            return

        if delivered:
            message.ack()
            return

        if self.route_to_retry(record):
            message.ack()
        else:
            message.requeue()
