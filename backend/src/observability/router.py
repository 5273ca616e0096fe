"""Observability API endpoints.

Provides metrics, health checks, and readiness probes for monitoring.
"""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from config import Settings
from dependencies import get_app_settings, get_share_store
from shares.store import ShareStore
from .health import (
    check_extraction_config,
    check_share_store_health,
    get_overall_health,
    HealthStatus,
)

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Expose Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get(
    "/health",
    summary="Health check endpoint",
    description="Returns health status of the share store and extraction configuration",
)
def health_check(
    store: ShareStore = Depends(get_share_store),
    settings: Settings = Depends(get_app_settings),
):
    """Returns 200 unless a component is unhealthy, then 503."""
    components = {
        "share_store": check_share_store_health(store),
        "extraction": check_extraction_config(settings.ANTHROPIC_API_KEY),
    }
    overall_status = get_overall_health(components)

    response_data = {
        "status": overall_status.value,
        "components": {
            name: {
                "status": comp.status.value,
                "message": comp.message,
                "latency_ms": comp.latency_ms,
            }
            for name, comp in components.items()
        }
    }

    status_code = 200 if overall_status != HealthStatus.UNHEALTHY else 503
    return JSONResponse(content=response_data, status_code=status_code)


@router.get("/ready", summary="Readiness check endpoint")
def readiness_check(store: ShareStore = Depends(get_share_store)):
    """Ready once the share database answers."""
    store_health = check_share_store_health(store)

    if store_health.status == HealthStatus.HEALTHY:
        return {
            "status": "ready",
            "message": "Application is ready to serve traffic"
        }
    return JSONResponse(
        content={
            "status": "not_ready",
            "message": store_health.message
        },
        status_code=503
    )
