"""Annotated dependency aliases for route handlers."""

from typing import Annotated

from fastapi import Depends

from infrastructure.configuration import Settings
from infrastructure.notifications import NotificationService
from infrastructure.services.container import DeliveryContainer
from infrastructure.services.providers import get_container, get_settings

SettingsDep = Annotated[Settings, Depends(get_settings)]

DeliveryContainerDep = Annotated[DeliveryContainer, Depends(get_container)]


def get_notification_service(container: DeliveryContainerDep) -> NotificationService:
    return container.notification_service


NotificationServiceDep = Annotated[
    NotificationService, Depends(get_notification_service)
]
