"""Structured logging for the API and queue consumers.

``configure_logging()`` installs the structlog pipeline, ``get_module_logger()``
hands out component-bound loggers, and the ``bind_*_context`` managers attach
correlation ids and queue metadata to every entry logged inside them.
"""

from infrastructure.logging.setup import configure_logging, get_module_logger
from infrastructure.logging.context import (
    bind_message_context,
    bind_request_context,
    clear_request_context,
    get_correlation_id,
)
from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
)

__all__ = [
    "configure_logging",
    "get_module_logger",
    "bind_message_context",
    "bind_request_context",
    "clear_request_context",
    "get_correlation_id",
    "SENSITIVE_PATTERNS",
    "add_app_info",
    "mask_sensitive_data",
    "truncate_large_values",
]
