"""
Health Router: readiness and Redis connectivity.
"""
from fastapi import APIRouter, Request, Response, status
from pos_aggregator.services.cache_service import cache_service

router = APIRouter()


@router.get("/health")
async def health_check(request: Request, response: Response):
    """
    Check core services.
    Returns 503 if app is still initializing (Readiness Probe).
    """
    if not getattr(request.app.state, "is_ready", False):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "initializing", "message": "Application is starting up"}

    health_status = {"status": "healthy", "services": {"redis": "unknown"}}

    if await cache_service.ping():
        health_status["services"]["redis"] = "up"
    else:
        health_status["services"]["redis"] = "down"
        health_status["status"] = "degraded"

    return health_status
