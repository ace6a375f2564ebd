"""Status codes carried by OperationResult."""

from enum import Enum


class OperationStatus(Enum):
    SUCCESS = "success"
    # Throttling, timeouts, connection resets
    TRANSIENT_ERROR = "transient_error"
    # Validation errors, conditional check failures
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    # Missing table, index or record
    NOT_FOUND = "not_found"
