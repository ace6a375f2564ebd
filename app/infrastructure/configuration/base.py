"""Base classes shared by the settings sections."""

from pydantic_settings import BaseSettings, SettingsConfigDict

SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    case_sensitive=True,
    extra="ignore",
    populate_by_name=True,
)


class IntegrationSettings(BaseSettings):
    """Sections describing external services: channel gateways and AWS."""

    model_config = SECTION_CONFIG


class InfrastructureSettings(BaseSettings):
    """Sections describing the service's own machinery: broker, store,
    delivery pipeline and HTTP server."""

    model_config = SECTION_CONFIG
