from typing import Optional, TYPE_CHECKING

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.dependencies.rate_limits import setup_rate_limiter
from api.router import api_router
from api.schemas import error_body
from infrastructure.logging import get_module_logger
from infrastructure.notifications import InvalidNotificationRequest, NotificationError
from infrastructure.services import get_settings
from server.lifespan import lifespan
from server.middleware import CorrelationIdMiddleware

if TYPE_CHECKING:
    from infrastructure.configuration import Settings
    from infrastructure.services import DeliveryContainer

logger = get_module_logger()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message = f"Cannot {request.method} {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    _request: Request, exc: RequestValidationError
):
    errors = exc.errors()
    if errors and errors[0].get("type") == "json_invalid":
        message = "Invalid JSON body"
    else:
        message = "Invalid request body"
    logger.info("request_validation_failed", errors=len(errors))
    return JSONResponse(status_code=400, content=error_body(message))


async def invalid_request_handler(_request: Request, exc: InvalidNotificationRequest):
    return JSONResponse(status_code=400, content=error_body(str(exc)))


async def notification_error_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_request_error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


def create_app(
    container: Optional["DeliveryContainer"] = None,
    settings: Optional["Settings"] = None,
    start_workers: bool = True,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        container: Pre-built delivery container. Built and connected in the
            lifespan when omitted.
        settings: Settings override. Defaults to the cached settings.
        start_workers: Start the consumers and scheduler on startup.

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    handler = FastAPI(title="Notification Service", lifespan=lifespan)
    handler.state.container = container
    handler.state.settings = settings
    handler.state.start_workers = start_workers

    setup_rate_limiter(handler)

    allow_origins = ["*"] if settings.is_production else settings.server.cors_origins
    handler.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    handler.add_middleware(CorrelationIdMiddleware)

    handler.add_exception_handler(StarletteHTTPException, http_exception_handler)
    handler.add_exception_handler(HTTPException, http_exception_handler)
    handler.add_exception_handler(RequestValidationError, validation_exception_handler)
    handler.add_exception_handler(InvalidNotificationRequest, invalid_request_handler)
    handler.add_exception_handler(NotificationError, notification_error_handler)
    handler.add_exception_handler(Exception, notification_error_handler)

    handler.include_router(api_router)
    return handler
