"""
Health Check API Routes
Endpoints for service health monitoring and Prometheus scraping.
"""

import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from src.config.constants import SERVICE_NAME, SERVICE_VERSION
from src.config.settings import get_settings
from src.database import database_health_check
from src.models.schemas import HealthResponse
from src.utils.date_utils import utc_now
from src.utils.metrics import metrics

router = APIRouter(tags=["health"])

# Global startup time for uptime calculation
SERVICE_START_TIME = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Simple health check endpoint for load balancers"
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        timestamp=utc_now(),
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
    description="Health of MongoDB and Redis"
)
async def detailed_health_check():
    databases = await database_health_check()
    overall = databases.get("overall_status", "unhealthy")

    health = HealthResponse(
        status=overall,
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        timestamp=utc_now(),
        details={
            "environment": get_settings().ENVIRONMENT.value,
            "uptime_seconds": round(time.time() - SERVICE_START_TIME, 2),
            "telegram_configured": get_settings().has_telegram_credentials(),
            "databases": databases.get("databases", {}),
        },
    )

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(status_code=status_code, content=health.model_dump(mode="json"))


@router.get("/metrics", summary="Prometheus metrics", include_in_schema=False)
async def prometheus_metrics() -> Response:
    payload, content_type = metrics.render()
    return Response(content=payload, media_type=content_type)
