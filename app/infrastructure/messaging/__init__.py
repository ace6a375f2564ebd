"""AMQP messaging.

Public API:
    - QueueBroker: exchange/queue declaration, publishing, consuming
    - ConsumerPool: worker threads consuming the dispatch and retry queues
    - MessageHandler: handler signature, (body, message) -> None
"""

from infrastructure.messaging.broker import MessageHandler, QueueBroker
from infrastructure.messaging.consumer import ConsumerPool

__all__ = ["ConsumerPool", "MessageHandler", "QueueBroker"]
