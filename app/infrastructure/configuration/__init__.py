"""Configuration for the notification service.

Settings are pydantic-settings models read from the environment and ``.env``.
Application code gets the cached instance from
``infrastructure.services.get_settings()``; the section classes are exported
for tests that build partial overrides.
"""

from infrastructure.configuration.settings import Settings
from infrastructure.configuration.infrastructure import (
    BrokerSettings,
    DeliverySettings,
    ServerSettings,
    StoreSettings,
)
from infrastructure.configuration.integrations import AwsSettings, ChannelSettings

__all__ = [
    "Settings",
    "AwsSettings",
    "BrokerSettings",
    "ChannelSettings",
    "DeliverySettings",
    "ServerSettings",
    "StoreSettings",
]
