"""kombu-backed queue broker.

One durable direct exchange with two durable queues (dispatch and retry),
each bound by a routing key equal to its name. Messages are JSON, persistent
and acknowledged manually by the handler.

Usage:
    broker = QueueBroker(settings.broker)
    broker.connect()

    broker.enqueue(settings.broker.dispatch_queue, notification.to_message())

    stop = threading.Event()
    broker.consume(settings.broker.dispatch_queue, dispatcher.handle_message, stop)

kombu connections are not thread-safe. Publishing goes through one
connection guarded by a lock; every consumer runs on its own clone.
"""

import socket
import threading
from typing import Any, Callable, Dict, Optional

import structlog
from kombu import Connection, Exchange, Queue
from kombu.message import Message

from infrastructure.configuration import BrokerSettings
from infrastructure.logging import (
    bind_message_context,
    bind_request_context,
    get_correlation_id,
)
from infrastructure.notifications.errors import BrokerConnectionError, BrokerError

logger = structlog.get_logger()

MessageHandler = Callable[[Any, Message], None]

PERSISTENT_DELIVERY_MODE = 2
DEFAULT_POLL_TIMEOUT = 1.0
RECONNECT_DELAY_SECONDS = 2.0


class QueueBroker:
    """AMQP broker adapter for the notification queues.

    Args:
        settings: Broker settings (URL, exchange, queue names, prefetch)
        connection_factory: Callable building a kombu Connection from a URL
    """

    def __init__(
        self,
        settings: BrokerSettings,
        connection_factory: Callable[[str], Connection] = Connection,
    ):
        self._settings = settings
        self._connection_factory = connection_factory
        self._connection: Optional[Connection] = None
        self._producer = None
        self._publish_lock = threading.Lock()

        self.exchange = Exchange(settings.exchange, type="direct", durable=True)
        self._queues: Dict[str, Queue] = {
            name: Queue(
                name,
                exchange=self.exchange,
                routing_key=name,
                durable=True,
            )
            for name in (settings.dispatch_queue, settings.retry_queue)
        }

    @property
    def is_connected(self) -> bool:
        return self._connection is not None and self._connection.connected

    @property
    def queue_names(self) -> list[str]:
        return list(self._queues.keys())

    def get_queue(self, queue_name: str) -> Queue:
        try:
            return self._queues[queue_name]
        except KeyError:
            raise BrokerError(f"Unknown queue: {queue_name}") from None

    def connect(self) -> None:
        """Connect and declare the exchange, queues and bindings.

        Raises:
            BrokerConnectionError: If the connection cannot be established
                within BROKER_CONNECT_MAX_RETRIES attempts.
        """
        connection = self._connection_factory(self._settings.url)

        def _on_error(exc: Exception, interval: float) -> None:
            logger.warning(
                "broker_connection_retry",
                error=str(exc),
                retry_in_seconds=interval,
            )

        try:
            connection.ensure_connection(
                max_retries=self._settings.connect_max_retries,
                errback=_on_error,
                interval_start=1,
                interval_step=1,
                interval_max=5,
            )
            with connection.channel() as channel:
                for queue in self._queues.values():
                    queue(channel).declare()
        except Exception as e:
            connection.release()
            logger.error(
                "broker_connection_failed",
                exchange=self._settings.exchange,
                error=str(e),
            )
            raise BrokerConnectionError(f"Cannot connect to broker: {e}") from e

        self._connection = connection
        logger.info(
            "broker_connected",
            exchange=self._settings.exchange,
            queues=self.queue_names,
            transport=connection.transport_cls,
        )

    def _require_connection(self) -> Connection:
        if self._connection is None:
            raise BrokerError("Broker is not connected")
        return self._connection

    def _get_producer(self):
        if self._producer is None:
            connection = self._require_connection()
            connection.ensure_connection(max_retries=1)
            self._producer = connection.Producer(serializer="json")
        return self._producer

    def enqueue(self, routing_key: str, payload: Dict[str, Any]) -> bool:
        """Publish a persistent JSON message.

        Failures are logged and reported as False; nothing is retried here.

        Args:
            routing_key: Target queue name
            payload: JSON-compatible message body

        Returns:
            True if the broker accepted the message, False otherwise
        """
        if routing_key not in self._queues:
            logger.error("enqueue_unknown_routing_key", routing_key=routing_key)
            return False
        if self._connection is None:
            logger.error("enqueue_without_connection", routing_key=routing_key)
            return False

        headers = {}
        correlation_id = get_correlation_id()
        if correlation_id:
            headers["correlation_id"] = correlation_id

        try:
            with self._publish_lock:
                self._get_producer().publish(
                    payload,
                    exchange=self.exchange,
                    routing_key=routing_key,
                    delivery_mode=PERSISTENT_DELIVERY_MODE,
                    headers=headers,
                    retry=False,
                )
        except Exception as e:
            with self._publish_lock:
                self._producer = None
                self._connection.collect()
            logger.error(
                "enqueue_failed",
                routing_key=routing_key,
                notification_id=payload.get("id"),
                error=str(e),
            )
            return False

        logger.debug(
            "message_enqueued",
            routing_key=routing_key,
            notification_id=payload.get("id"),
        )
        return True

    def _make_callback(self, queue_name: str, handler: MessageHandler):
        def on_message(body: Any, message: Message) -> None:
            notification_id = body.get("id") if isinstance(body, dict) else None
            correlation_id = (message.headers or {}).get("correlation_id")
            with bind_request_context(correlation_id=correlation_id):
                with bind_message_context(
                    queue=queue_name, notification_id=notification_id
                ):
                    try:
                        handler(body, message)
                    except Exception as e:
                        logger.error(
                            "message_handler_failed",
                            error=str(e),
                            exc_info=True,
                        )
                        if not message.acknowledged:
                            message.requeue()

        return on_message

    def _on_decode_error(self, message: Message, exc: Exception) -> None:
        logger.error(
            "message_decode_failed",
            content_type=message.content_type,
            error=str(exc),
        )
        message.reject()

    def consume(
        self,
        queue_name: str,
        handler: MessageHandler,
        stop_event: threading.Event,
        prefetch_count: Optional[int] = None,
        poll_timeout: float = DEFAULT_POLL_TIMEOUT,
    ) -> None:
        """Consume a queue until stop_event is set.

        Runs on a cloned connection owned by the calling thread. The handler
        must ack, requeue or reject each message; if it raises, the message
        is requeued unless it was already acknowledged. Lost connections are
        re-established until stop_event is set.
        """
        queue = self.get_queue(queue_name)
        connection = self._require_connection()
        prefetch = prefetch_count or self._settings.prefetch_count
        callback = self._make_callback(queue_name, handler)

        logger.info("consumer_started", queue=queue_name, prefetch_count=prefetch)
        while not stop_event.is_set():
            try:
                with connection.clone() as conn:
                    conn.ensure_connection(
                        max_retries=self._settings.connect_max_retries
                    )
                    with conn.Consumer(
                        queues=[queue],
                        callbacks=[callback],
                        accept=["json"],
                        prefetch_count=prefetch,
                        on_decode_error=self._on_decode_error,
                    ):
                        while not stop_event.is_set():
                            try:
                                conn.drain_events(timeout=poll_timeout)
                            except socket.timeout:
                                continue
            except Exception as e:
                logger.error(
                    "consumer_connection_lost",
                    queue=queue_name,
                    error=str(e),
                    exc_info=True,
                )
                stop_event.wait(RECONNECT_DELAY_SECONDS)

        logger.info("consumer_stopped", queue=queue_name)

    def drain(
        self,
        queue_name: str,
        handler: MessageHandler,
        timeout: float = DEFAULT_POLL_TIMEOUT,
    ) -> int:
        """Process messages until the queue has been idle for timeout seconds.

        Returns:
            Number of messages delivered to the handler
        """
        queue = self.get_queue(queue_name)
        callback = self._make_callback(queue_name, handler)
        processed = 0

        def counting_callback(body: Any, message: Message) -> None:
            nonlocal processed
            processed += 1
            callback(body, message)

        with self._require_connection().clone() as conn:
            with conn.Consumer(
                queues=[queue],
                callbacks=[counting_callback],
                accept=["json"],
                prefetch_count=self._settings.prefetch_count,
                on_decode_error=self._on_decode_error,
            ):
                while True:
                    try:
                        conn.drain_events(timeout=timeout)
                    except socket.timeout:
                        break

        logger.debug("queue_drained", queue=queue_name, processed=processed)
        return processed

    def close(self) -> None:
        with self._publish_lock:
            self._producer = None
            if self._connection is not None:
                self._connection.release()
                self._connection = None
        logger.info("broker_closed")
