"""Providers behind the FastAPI dependencies."""

from functools import lru_cache

from fastapi import Request

from infrastructure.configuration import Settings
from infrastructure.services.container import DeliveryContainer


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read from the environment once.

    Routes should depend on ``SettingsDep`` instead so tests can override it.
    """
    return Settings()


def get_container(request: Request) -> DeliveryContainer:
    """The DeliveryContainer stored on ``app.state`` at startup."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Delivery container is not initialized")
    return container
