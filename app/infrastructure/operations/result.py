"""Result type for store, AWS and channel operations."""

from dataclasses import dataclass
from typing import Any, Optional

from infrastructure.operations.status import OperationStatus


@dataclass
class OperationResult:
    """Outcome of a single infrastructure call.

    The DynamoDB client and channel health checks return one of these
    instead of raising, so callers can branch on ``status`` and decide
    whether to retry, surface a StoreError, or mark a channel unhealthy.

    Attributes:
        status: High-level outcome
        message: Short description for logs
        data: Payload on success (an item, a list of items, health details)
        error_code: Remote error code, e.g. ``ConditionalCheckFailedException``
    """

    status: OperationStatus
    message: str
    data: Optional[Any] = None
    error_code: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @property
    def is_transient(self) -> bool:
        """Whether the same call may succeed if attempted again."""
        return self.status == OperationStatus.TRANSIENT_ERROR

    @classmethod
    def success(cls, data: Optional[Any] = None, message: str = "ok"):
        return cls(status=OperationStatus.SUCCESS, message=message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
        data: Optional[Any] = None,
    ) -> "OperationResult":
        return cls(status=status, message=message, error_code=error_code, data=data)

    @classmethod
    def transient_error(cls, message: str, error_code: Optional[str] = None):
        """Throttling, timeouts and connection failures."""
        return cls.error(OperationStatus.TRANSIENT_ERROR, message, error_code)

    @classmethod
    def permanent_error(cls, message: str, error_code: Optional[str] = None):
        """Validation failures and failed conditional writes."""
        return cls.error(OperationStatus.PERMANENT_ERROR, message, error_code)
