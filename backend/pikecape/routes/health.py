"""
Pikecape Backend - Health Check Route
======================================

What:  Health check endpoint for monitoring and load balancer checks.
How:   Pings MongoDB through the DatabaseHandle stored on app.state.
Who:   Docker health checks, load balancers, monitoring.

Status levels:
    - healthy:   MongoDB answered the ping (HTTP 200)
    - unhealthy: MongoDB unreachable or never initialized (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from pikecape import __version__
from pikecape.schemas.duck import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    handle = getattr(request.app.state, "database", None)
    try:
        if handle is None:
            raise RuntimeError("database not initialized")
        await handle.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
