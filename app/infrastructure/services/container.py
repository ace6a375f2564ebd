"""Delivery container.

Builds every delivery component once, explicitly, and owns their lifecycle:
connect at startup, start/stop the workers, close the broker and store.
The HTTP app and the consumer threads share one container.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, TYPE_CHECKING

import structlog

from infrastructure.messaging import ConsumerPool, QueueBroker
from infrastructure.messaging.consumer import ConsumerSpec
from infrastructure.notifications import (
    BackoffScheduler,
    ChannelRegistry,
    Dispatcher,
    NotificationService,
    NotificationStore,
    RetryHandler,
    StatusTracker,
    build_channel_registry,
    create_notification_store,
)

if TYPE_CHECKING:
    from infrastructure.configuration import Settings

logger = structlog.get_logger()


@dataclass
class DeliveryContainer:
    """Explicitly constructed delivery components.

    Attributes:
        settings: Application settings
        store: Notification record store
        broker: Queue broker
        registry: Channel registry
        tracker: Status tracker over the store
        dispatcher: Dispatch-queue handler
        scheduler: Backoff scheduler
        retry_handler: Retry-queue handler
        notification_service: Ingress use-cases
        consumer_pool: Consumer threads for both queues
    """

    settings: "Settings"
    store: NotificationStore
    broker: QueueBroker
    registry: ChannelRegistry
    tracker: StatusTracker
    dispatcher: Dispatcher
    scheduler: BackoffScheduler
    retry_handler: RetryHandler
    notification_service: NotificationService
    consumer_pool: ConsumerPool
    workers_started: bool = False

    @classmethod
    def build(
        cls,
        settings: "Settings",
        store: Optional[NotificationStore] = None,
        broker: Optional[QueueBroker] = None,
        registry: Optional[ChannelRegistry] = None,
        scheduler: Optional[BackoffScheduler] = None,
    ) -> "DeliveryContainer":
        """Assemble the container; any component can be passed in for tests."""
        store = store or create_notification_store(settings)
        broker = broker or QueueBroker(settings.broker)
        registry = registry or build_channel_registry(settings.channels)
        scheduler = scheduler or BackoffScheduler(
            max_workers=settings.delivery.scheduler_max_workers
        )

        tracker = StatusTracker(store)
        dispatcher = Dispatcher(
            registry=registry,
            tracker=tracker,
            broker=broker,
            retry_routing_key=settings.broker.retry_queue,
        )
        retry_handler = RetryHandler(
            dispatcher=dispatcher,
            tracker=tracker,
            scheduler=scheduler,
            max_retries=settings.delivery.max_retries,
            retry_interval_ms=settings.delivery.retry_interval_ms,
        )
        notification_service = NotificationService(
            store=store,
            broker=broker,
            dispatch_routing_key=settings.broker.dispatch_queue,
        )

        consumer_pool = ConsumerPool(broker)
        consumer_pool.add(
            ConsumerSpec(
                queue_name=settings.broker.dispatch_queue,
                handler=dispatcher.handle_message,
                concurrency=settings.delivery.dispatch_concurrency,
            )
        )
        consumer_pool.add(
            ConsumerSpec(
                queue_name=settings.broker.retry_queue,
                handler=retry_handler.handle_message,
                concurrency=settings.delivery.retry_concurrency,
            )
        )

        return cls(
            settings=settings,
            store=store,
            broker=broker,
            registry=registry,
            tracker=tracker,
            dispatcher=dispatcher,
            scheduler=scheduler,
            retry_handler=retry_handler,
            notification_service=notification_service,
            consumer_pool=consumer_pool,
        )

    def connect(self) -> None:
        """Verify the store and connect the broker.

        Raises:
            StoreError: If the store is unreachable
            BrokerConnectionError: If the broker is unreachable
        """
        self.store.ping()
        if not self.broker.is_connected:
            self.broker.connect()
        logger.info("delivery_infrastructure_connected")

    def start_workers(self) -> None:
        """Start the scheduler, recover pending retries, start consumers."""
        if self.workers_started:
            return
        self.scheduler.start()
        if self.settings.delivery.recover_on_startup:
            self.retry_handler.recover_pending()
        self.consumer_pool.start()
        self.workers_started = True
        logger.info("delivery_workers_started")

    def shutdown(self) -> None:
        """Stop consumers, drop pending retry jobs, close broker and store."""
        timeout = self.settings.delivery.shutdown_timeout_seconds
        if self.workers_started:
            self.consumer_pool.stop(timeout=timeout)
            self.scheduler.stop(wait=True)
            self.workers_started = False
        self.broker.close()
        self.store.close()
        logger.info("delivery_infrastructure_closed")

    def health(self) -> Dict[str, Any]:
        """Component health for the /health endpoint."""
        return {
            "broker": self.broker.is_connected,
            "workers": self.consumer_pool.is_running,
            "scheduler": self.scheduler.is_running,
            "pending_retries": self.scheduler.pending_count(),
            "channels": self.registry.health_check(),
        }
