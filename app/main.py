import sys

import uvicorn

from infrastructure.logging import configure_logging
from infrastructure.notifications import BrokerConnectionError, StoreError
from infrastructure.services import DeliveryContainer, get_settings
from server.server import create_app


def main():
    """Connect the delivery infrastructure and serve the HTTP API."""
    settings = get_settings()
    logger = configure_logging(
        log_level=settings.LOG_LEVEL, is_production=settings.is_production
    )

    container = DeliveryContainer.build(settings)
    try:
        container.connect()
    except (BrokerConnectionError, StoreError) as e:
        logger.critical("delivery_infrastructure_unavailable", error=str(e))
        sys.exit(1)

    app = create_app(container=container, settings=settings)
    logger.info("server_starting", host=settings.server.HOST, port=settings.server.PORT)
    uvicorn.run(
        app,
        host=settings.server.HOST,
        port=settings.server.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
