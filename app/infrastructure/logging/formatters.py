"""Structlog processors applied before rendering."""

from typing import Any

EventDict = dict[str, Any]

# Key fragments whose values never reach the logs. Gateway credentials
# and recipient phone numbers both end up in bound context.
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "credential",
        "account_sid",
        "cookie",
    }
)

REDACTED = "***REDACTED***"


def add_app_info(app_name: str, app_version: str = "unknown"):
    """Stamp every entry with the service name and deployed git sha."""

    def processor(_logger: Any, _method: str, event_dict: EventDict) -> EventDict:
        event_dict["app_name"] = app_name
        event_dict["app_version"] = app_version
        return event_dict

    return processor


def mask_sensitive_data(additional_patterns: frozenset[str] = frozenset()):
    """Redact values whose key contains a sensitive fragment (case-insensitive).

    None values pass through untouched so that "not configured" stays visible.
    """
    patterns = SENSITIVE_PATTERNS | additional_patterns

    def processor(_logger: Any, _method: str, event_dict: EventDict) -> EventDict:
        return {
            key: (
                REDACTED
                if value is not None and any(p in key.lower() for p in patterns)
                else value
            )
            for key, value in event_dict.items()
        }

    return processor


def truncate_large_values(max_length: int = 500):
    """Cut long strings such as notification content down to ``max_length``."""

    def processor(_logger: Any, _method: str, event_dict: EventDict) -> EventDict:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    f"{value[:max_length]}...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
