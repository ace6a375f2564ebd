"""Top-level settings object for the notification service."""

from typing import ClassVar

from pydantic_settings import BaseSettings, SettingsConfigDict

from infrastructure.configuration.integrations import (
    AwsSettings,
    ChannelSettings,
)
from infrastructure.configuration.infrastructure import (
    BrokerSettings,
    DeliverySettings,
    ServerSettings,
    StoreSettings,
)


class Settings(BaseSettings):
    """Every configuration section, loaded from the environment and ``.env``.

    Sections not passed explicitly are built from the environment, so tests
    can override a single section:

        settings = Settings(PREFIX="test", store=StoreSettings(STORE_BACKEND="memory"))

    Environment Variables:
        PREFIX: Environment prefix; empty means production
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Deployed commit, reported by /version
    """

    SECTIONS: ClassVar[dict[str, type[BaseSettings]]] = {
        "aws": AwsSettings,
        "channels": ChannelSettings,
        "server": ServerSettings,
        "broker": BrokerSettings,
        "store": StoreSettings,
        "delivery": DeliverySettings,
    }

    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    aws: AwsSettings
    channels: ChannelSettings
    server: ServerSettings
    broker: BrokerSettings
    store: StoreSettings
    delivery: DeliverySettings

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        for name, section in self.SECTIONS.items():
            if name not in kwargs:
                kwargs[name] = section()
        super().__init__(**kwargs)

    @property
    def is_production(self) -> bool:
        return not self.PREFIX
