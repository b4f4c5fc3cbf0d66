"""Health check endpoints for the Apex Trader API."""

import platform
import time
from typing import Any, Dict

from fastapi import APIRouter

from .. import __version__
from ..config.logging import get_logger
from ..config.settings import get_settings
from ..ormdb.database import check_database_health
from .models.responses import HealthResponse, HealthStatus

logger = get_logger(__name__)
router = APIRouter()

# Track application start time for uptime calculation
_app_start_time = time.time()


def check_configuration_health() -> Dict[str, Any]:
    """Check trading configuration health."""
    try:
        settings = get_settings()

        checks = {
            "database_url_configured": bool(settings.get_database_url()),
            "benchmark_configured": bool(settings.benchmark_symbol),
            "fee_configured": settings.transaction_fee >= 0,
        }

        return {
            "status": "healthy" if all(checks.values()) else "degraded",
            "checks": checks,
            "environment": settings.environment,
        }

    except Exception as e:
        logger.error("Configuration health check failed", error=str(e), exc_info=True)
        return {
            "status": "unhealthy",
            "error": str(e),
        }


@router.get("/health", response_model=HealthResponse, summary="Basic Health Check")
async def basic_health_check():
    """
    Perform a basic health check.

    Returns overall status, database connectivity, configuration checks
    and application uptime.
    """
    try:
        uptime_seconds = time.time() - _app_start_time

        services = {
            "database": check_database_health(),
            "configuration": check_configuration_health(),
            "runtime": {
                "status": "healthy",
                "python_version": platform.python_version(),
            },
        }

        statuses = [service["status"] for service in services.values()]
        if "unhealthy" in statuses:
            overall_status = "unhealthy"
        elif "degraded" in statuses:
            overall_status = "degraded"
        else:
            overall_status = "healthy"

        health_status = HealthStatus(
            status=overall_status,
            services=services,
            uptime_seconds=uptime_seconds,
            version=__version__,
        )

        logger.debug("Basic health check completed", status=overall_status)
        return HealthResponse(success=True, health=health_status)

    except Exception as e:
        logger.error("Health check failed", error=str(e), exc_info=True)

        health_status = HealthStatus(
            status="unhealthy",
            services={"error": {"status": "unhealthy", "error": str(e)}},
            uptime_seconds=time.time() - _app_start_time,
            version=__version__,
        )

        return HealthResponse(
            success=True, health=health_status  # The health endpoint itself succeeded
        )
