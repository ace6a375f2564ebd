"""Correlation context for log entries.

HTTP requests and queue messages each bind their identifiers for the
duration of the work, so every entry logged by the store, dispatcher or
channels inside the block carries them:

    with bind_request_context(correlation_id=header_value) as correlation_id:
        ...

    with bind_message_context(queue="dispatch", notification_id="abc"):
        ...
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def _bound(context: dict[str, Any]) -> Generator[None, None, None]:
    # Consumer threads handle many messages, so keys are always unbound
    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    request_path: Optional[str] = None,
    request_method: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind request fields to all logs within the block.

    Yields the correlation id in effect, generated when the caller has none.
    """
    context: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}
    if request_path is not None:
        context["request_path"] = request_path
    if request_method is not None:
        context["request_method"] = request_method
    context.update(extra_context)

    with _bound(context):
        yield context["correlation_id"]


@contextmanager
def bind_message_context(
    queue: str,
    notification_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind the consuming queue and notification id while a message is handled."""
    context: dict[str, Any] = {"queue": queue}
    if notification_id is not None:
        context["notification_id"] = notification_id
    context.update(extra_context)

    with _bound(context):
        yield


def get_correlation_id() -> Optional[str]:
    return structlog.contextvars.get_contextvars().get("correlation_id")


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
