"""Service wiring: the DeliveryContainer and the FastAPI providers over it."""

from infrastructure.services.container import DeliveryContainer
from infrastructure.services.dependencies import (
    DeliveryContainerDep,
    NotificationServiceDep,
    SettingsDep,
    get_notification_service,
)
from infrastructure.services.providers import get_container, get_settings

__all__ = [
    "DeliveryContainer",
    "DeliveryContainerDep",
    "NotificationServiceDep",
    "SettingsDep",
    "get_container",
    "get_notification_service",
    "get_settings",
]
