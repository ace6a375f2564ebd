from fastapi import APIRouter, Request

from api.dependencies.rate_limits import HEALTHCHECK_LIMIT, get_limiter
from infrastructure.services import DeliveryContainerDep, SettingsDep

router = APIRouter(tags=["System"])
limiter = get_limiter()


@router.get("/version")
@limiter.limit(HEALTHCHECK_LIMIT)
def get_version(request: Request, settings: SettingsDep):  # pylint: disable=unused-argument
    """Get the version of the application."""
    return {"version": settings.GIT_SHA}


@router.get("/health")
@limiter.limit(HEALTHCHECK_LIMIT)
def get_health(request: Request):  # pylint: disable=unused-argument
    """Healthcheck endpoint."""
    return {"status": "ok"}


@router.get("/health/ready")
@limiter.limit(HEALTHCHECK_LIMIT)
def get_readiness(request: Request, container: DeliveryContainerDep):  # pylint: disable=unused-argument
    """Readiness of the delivery pipeline (broker, workers, channels)."""
    components = container.health()
    ready = components["broker"] and all(components["channels"].values())
    return {"status": "ok" if ready else "degraded", "components": components}
