"""API request and response schemas.

Wire names are camelCase (userId, createdAt, ...). Every response uses the
envelope {"status": "success", "data": ...} or {"status": "error",
"message": ...}.

Key distinction from infrastructure.notifications.models:
  - schemas.py: HTTP contracts, camelCase aliases, lenient input
  - models.py: the stored record and queue payload
"""

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from infrastructure.notifications import Notification

T = TypeVar("T")


class CreateNotificationRequest(BaseModel):
    """Body of POST /notifications.

    Every field is optional here so that missing fields reach the service
    and produce the documented 400 message.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    # Validated by ChannelType.parse so bad values get the channel list
    type: Any = None
    title: Optional[str] = None
    content: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class NotificationResponse(BaseModel):
    """API view of a notification record."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    type: str
    title: str
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    status: str
    retry_count: int = Field(alias="retryCount")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    sent_at: Optional[datetime] = Field(default=None, alias="sentAt")

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            user_id=notification.user_id,
            type=notification.channel.value,
            title=notification.title,
            content=notification.content,
            metadata=notification.metadata,
            status=notification.status.value,
            retry_count=notification.retry_count,
            created_at=notification.created_at,
            updated_at=notification.updated_at,
            sent_at=notification.sent_at,
        )

    def to_wire(self) -> Dict[str, Any]:
        """camelCase JSON dict; sentAt is omitted until the notification is sent."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class SuccessResponse(BaseModel, Generic[T]):
    status: str = "success"
    data: T


class ErrorResponse(BaseModel):
    status: str = "error"
    message: str


def success_body(data: Any) -> Dict[str, Any]:
    return {"status": "success", "data": data}


def error_body(message: str) -> Dict[str, Any]:
    return ErrorResponse(message=message).model_dump()


def notifications_body(notifications: List[Notification]) -> Dict[str, Any]:
    return success_body(
        [NotificationResponse.from_notification(n).to_wire() for n in notifications]
    )
