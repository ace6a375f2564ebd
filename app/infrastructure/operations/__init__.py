"""Operation result types and status enums.

Standardized result types for infrastructure operations (store, AWS client,
channel health checks).
"""

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
]
