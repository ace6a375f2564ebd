"""Settings sections for the broker, store, delivery pipeline and server."""

from infrastructure.configuration.infrastructure.broker import BrokerSettings
from infrastructure.configuration.infrastructure.delivery import DeliverySettings
from infrastructure.configuration.infrastructure.server import ServerSettings
from infrastructure.configuration.infrastructure.store import StoreSettings

__all__ = [
    "BrokerSettings",
    "DeliverySettings",
    "ServerSettings",
    "StoreSettings",
]
