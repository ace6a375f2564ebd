"""Notification record models.

A Notification is both the persisted record and the queue payload. The
store owns created_at/updated_at, the status tracker owns status,
retry_count, sent_at and next_attempt_at.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_notification_id() -> str:
    """Opaque unique notification id."""
    return uuid.uuid4().hex


class ChannelType(Enum):
    """Delivery channel requested for a notification."""

    EMAIL = "email"
    SMS = "sms"
    IN_APP = "in_app"

    @classmethod
    def parse(cls, value: str) -> "ChannelType":
        """Parse a channel type name case-insensitively.

        Raises:
            ValueError: If the value names no channel type.
        """
        normalized = value.strip().lower() if isinstance(value, str) else value
        return cls(normalized)

    @classmethod
    def names(cls) -> list[str]:
        return [member.value for member in cls]


class NotificationStatus(Enum):
    """Notification delivery status.

    PENDING -> SENT | RETRYING
    RETRYING -> SENT | RETRYING | FAILED
    SENT and FAILED are terminal.
    """

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    RETRYING = "retrying"

    @property
    def is_terminal(self) -> bool:
        return self in (NotificationStatus.SENT, NotificationStatus.FAILED)


class Notification(BaseModel):
    """Notification record.

    Attributes:
        id: Opaque unique id assigned at creation
        user_id: Recipient user id
        channel: Delivery channel
        title: Subject (email), heading (in-app), prefix (SMS)
        content: Message body
        metadata: Channel hints, e.g. {"phoneNumber": "+15551230000"}
        status: Current delivery status
        retry_count: Delivery attempts beyond the first
        created_at: Creation time (store managed)
        updated_at: Last modification time (store managed)
        sent_at: Time of successful delivery, set only with SENT
        next_attempt_at: Due time of the pending retry, set with RETRYING

    Example:
        notification = Notification(
            user_id="user-1",
            channel=ChannelType.SMS,
            title="Order shipped",
            content="Your order is on its way",
            metadata={"phoneNumber": "+15551230000"},
        )
        broker.enqueue("dispatch", notification.to_message())
    """

    id: str = Field(default_factory=new_notification_id)
    user_id: str
    channel: ChannelType
    title: str
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    status: NotificationStatus = NotificationStatus.PENDING
    retry_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    sent_at: Optional[datetime] = None
    next_attempt_at: Optional[datetime] = None

    @field_validator("user_id", "title", "content")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty or whitespace-only values."""
        if not v or not v.strip():
            raise ValueError("value cannot be empty")
        return v

    @field_validator("metadata", mode="before")
    @classmethod
    def default_metadata(cls, v: Any) -> Any:
        return {} if v is None else v

    def to_message(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible queue payload."""
        return self.model_dump(mode="json")

    @classmethod
    def from_message(cls, body: Union[Dict[str, Any], str, bytes]) -> "Notification":
        """Validate a queue payload back into a Notification.

        Raises:
            pydantic.ValidationError: If the payload is malformed.
        """
        if isinstance(body, (str, bytes)):
            return cls.model_validate_json(body)
        return cls.model_validate(body)
