"""Structlog configuration.

The API, the dispatch consumers and the retry consumers share one process,
so a single configuration covers every thread. Modules take their logger
from ``get_module_logger()`` or ``structlog.get_logger()``; both resolve
through the configuration installed here.
"""

import inspect
import logging
import sys
from typing import Any, Callable, Optional

import structlog
from structlog.stdlib import BoundLogger

from infrastructure.configuration import Settings
from infrastructure.logging.formatters import (
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
)

APP_NAME = "notification-service"

# Third-party loggers that are noisy at INFO
QUIET_LOGGERS = ("kombu", "amqp", "apscheduler", "botocore", "urllib3")


def _is_test_environment() -> bool:
    return "pytest" in sys.modules


def _silence() -> BoundLogger:
    logging.root.setLevel(logging.CRITICAL + 1)
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", level=logging.CRITICAL + 1, force=True)
    return structlog.stdlib.get_logger()


def _processors(git_sha: str, json_output: bool) -> list[Callable[..., Any]]:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        add_app_info(APP_NAME, git_sha),
        mask_sensitive_data(additional_patterns=frozenset({"phone"})),
        truncate_large_values(max_length=1000),
        renderer,
    ]


def configure_logging(
    log_level: Optional[str] = None,
    is_production: Optional[bool] = None,
    force: bool = False,
) -> BoundLogger:
    """Install the structlog pipeline and return a root logger.

    Under pytest everything is silenced unless ``force`` is set. Otherwise
    entries carry the bound correlation context, a timestamp, the call site
    and app info, with credentials and phone numbers masked. Production
    renders JSON, development renders for the console.

    Args:
        log_level: Overrides settings.LOG_LEVEL.
        is_production: Overrides settings.is_production.
        force: Configure the full pipeline even under pytest.
    """
    if _is_test_environment() and not force:
        return _silence()

    git_sha = "unknown"
    if log_level is None or is_production is None:
        settings = Settings()
        git_sha = settings.GIT_SHA
        log_level = log_level or settings.LOG_LEVEL
        if is_production is None:
            is_production = settings.is_production

    structlog.configure(
        processors=_processors(git_sha, json_output=is_production),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.stdlib.get_logger()


logger: BoundLogger = configure_logging()


def get_module_logger() -> BoundLogger:
    """Logger bound with the calling module's name as ``component``.

    Called from infrastructure/notifications/status.py, the entries carry
    ``component="status"`` and ``module_path="infrastructure.notifications.status"``.
    """
    current_frame = inspect.currentframe()
    frame = current_frame.f_back if current_frame is not None else None
    module = inspect.getmodule(frame) if frame is not None else None
    if module is None:
        return logger.bind(component="unknown")

    return logger.bind(
        component=module.__name__.rsplit(".", 1)[-1],
        module_path=module.__name__,
    )
