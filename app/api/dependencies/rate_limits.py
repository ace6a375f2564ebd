"""Request rate limiting for the public API."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from api.schemas import error_body

HEALTHCHECK_LIMIT = "50/minute"


def client_address(request: Request) -> str:
    """First hop of X-Forwarded-For when behind the load balancer."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    first_hop = forwarded.split(",")[0].strip()
    return first_hop or get_remote_address(request)


limiter = Limiter(key_func=client_address)


async def rate_limit_handler(_request: Request, exc: Exception):
    if isinstance(exc, RateLimitExceeded):
        return JSONResponse(status_code=429, content=error_body("Rate limit exceeded"))


def setup_rate_limiter(app: FastAPI):
    """Attach the shared limiter and its 429 handler to the app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


def get_limiter() -> Limiter:
    return limiter
