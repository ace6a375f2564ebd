from contextlib import asynccontextmanager
from typing import AsyncIterator, TYPE_CHECKING

from fastapi import FastAPI
from structlog.stdlib import BoundLogger

from infrastructure.logging.setup import configure_logging
from infrastructure.services import DeliveryContainer, get_settings

if TYPE_CHECKING:
    from infrastructure.configuration import Settings


def _get_logger(settings: "Settings") -> BoundLogger:
    return configure_logging(
        log_level=settings.LOG_LEVEL, is_production=settings.is_production
    )


def _list_configs(settings: "Settings", logger: BoundLogger) -> None:
    """Log top-level values and, per section, only the key names."""
    sections = set(settings.SECTIONS)
    dumped = settings.model_dump()

    logger.info(
        "configuration_initialized",
        base_settings={k: v for k, v in dumped.items() if k not in sections},
    )
    for name in sorted(sections):
        logger.info(
            "configuration_loaded", config_setting=name, keys=list(dumped[name])
        )


def _get_container(app: FastAPI, settings: "Settings") -> DeliveryContainer:
    container = getattr(app.state, "container", None)
    if container is None:
        container = DeliveryContainer.build(settings)
        container.connect()
        app.state.container = container
    return container


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = getattr(app.state, "settings", None) or get_settings()
    logger = _get_logger(settings)

    app.state.settings = settings
    app.state.logger = logger

    logger.info("application_startup")
    _list_configs(settings, logger)

    container = _get_container(app, settings)
    if getattr(app.state, "start_workers", True):
        container.start_workers()

    yield

    logger.info("application_shutdown")
    container.shutdown()
