from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from api.schemas import (
    CreateNotificationRequest,
    ErrorResponse,
    NotificationResponse,
    error_body,
    notifications_body,
    success_body,
)
from infrastructure.logging import get_module_logger
from infrastructure.notifications import EnqueueError, StoreError
from infrastructure.services import NotificationServiceDep

logger = get_module_logger()
router = APIRouter(tags=["Notifications"])


@router.post(
    "/notifications",
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_notification(
    request: CreateNotificationRequest,
    service: NotificationServiceDep,
):
    """Create a notification and queue it for delivery."""
    try:
        notification = service.create_notification(
            user_id=request.user_id,
            channel_type=request.type,
            title=request.title,
            content=request.content,
            metadata=request.metadata,
        )
    except (EnqueueError, StoreError) as e:
        logger.error("create_notification_failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Failed to send notification"),
        )

    return success_body(NotificationResponse.from_notification(notification).to_wire())


@router.get(
    "/users/{user_id}/notifications",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def get_user_notifications(user_id: str, service: NotificationServiceDep):
    """List a user's notifications, newest first."""
    try:
        notifications = service.list_for_user(user_id)
    except StoreError as e:
        logger.error("list_notifications_failed", user_id=user_id, error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Failed to get user notifications"),
        )

    return notifications_body(notifications)
