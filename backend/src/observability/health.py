"""Health checks for the share store and the extraction engine configuration."""

import time
from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from .logging_config import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status enum."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def check_share_store_health(store) -> ComponentHealth:
    """Count stored shares as a round trip to the share database."""
    try:
        start = time.perf_counter()
        stored = store.count()
        latency_ms = (time.perf_counter() - start) * 1000
    except SQLAlchemyError as e:
        logger.error(f"Share store health check failed: {e}", exc_info=True)
        return ComponentHealth(
            status=HealthStatus.UNHEALTHY,
            message=f"Database error: {type(e).__name__}",
        )

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message=f"{stored} shares stored",
        latency_ms=round(latency_ms, 2),
    )


def check_extraction_config(api_key: Optional[str]) -> ComponentHealth:
    """Extraction without an API key leaves sharing usable, hence degraded."""
    if api_key:
        return ComponentHealth(status=HealthStatus.HEALTHY, message="Extraction engine configured")
    return ComponentHealth(
        status=HealthStatus.DEGRADED,
        message="ANTHROPIC_API_KEY is not set; extraction is unavailable",
    )


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Determine overall health from component statuses."""
    if all(c.status == HealthStatus.HEALTHY for c in components.values()):
        return HealthStatus.HEALTHY

    if any(c.status == HealthStatus.UNHEALTHY for c in components.values()):
        return HealthStatus.UNHEALTHY

    return HealthStatus.DEGRADED
