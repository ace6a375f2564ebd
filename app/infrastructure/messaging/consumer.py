"""Consumer pool running queue handlers on worker threads."""

import threading
import time
from dataclasses import dataclass
from typing import List, Optional

import structlog

from infrastructure.messaging.broker import MessageHandler, QueueBroker

logger = structlog.get_logger()


@dataclass
class ConsumerSpec:
    """One queue, its handler and how many threads consume it."""

    queue_name: str
    handler: MessageHandler
    concurrency: int = 1
    prefetch_count: Optional[int] = None


class ConsumerPool:
    """Worker threads consuming broker queues.

    Each thread runs QueueBroker.consume() on its own connection. stop()
    signals every thread, then waits for in-flight handlers to finish.

    Example:
        pool = ConsumerPool(broker)
        pool.add(ConsumerSpec("dispatch", dispatcher.handle_message, concurrency=4))
        pool.add(ConsumerSpec("retry", retry_handler.handle_message, concurrency=2))
        pool.start()
        ...
        pool.stop(timeout=30)
    """

    def __init__(self, broker: QueueBroker):
        self._broker = broker
        self._specs: List[ConsumerSpec] = []
        self._threads: List[threading.Thread] = []
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def add(self, spec: ConsumerSpec) -> None:
        if self._threads:
            raise RuntimeError("Cannot add consumers to a started pool")
        if spec.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1: {spec.concurrency}")
        self._specs.append(spec)

    def start(self) -> None:
        if self._threads:
            logger.warning("consumer_pool_already_started")
            return

        self._stop_event.clear()
        for spec in self._specs:
            for index in range(spec.concurrency):
                thread = threading.Thread(
                    target=self._broker.consume,
                    kwargs={
                        "queue_name": spec.queue_name,
                        "handler": spec.handler,
                        "stop_event": self._stop_event,
                        "prefetch_count": spec.prefetch_count,
                    },
                    name=f"consumer-{spec.queue_name}-{index}",
                    daemon=True,
                )
                thread.start()
                self._threads.append(thread)

        logger.info(
            "consumer_pool_started",
            consumers={s.queue_name: s.concurrency for s in self._specs},
        )

    def stop(self, timeout: float = 30.0) -> bool:
        """Stop consuming and wait for in-flight handlers.

        Args:
            timeout: Total seconds to wait across all threads

        Returns:
            True if every thread exited within the timeout
        """
        self._stop_event.set()
        deadline = time.monotonic() + timeout
        for thread in self._threads:
            thread.join(max(0.0, deadline - time.monotonic()))

        alive = [t.name for t in self._threads if t.is_alive()]
        if alive:
            logger.warning("consumer_pool_stop_timeout", alive_threads=alive)
        else:
            logger.info("consumer_pool_stopped", threads=len(self._threads))
        self._threads = []
        return not alive
