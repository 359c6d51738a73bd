"""
SnippetHub Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and container probes.
How:   Pings the database with `SELECT 1` through the app's Database handle.

Status levels:
    - healthy:   database answers (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app import __version__
from app.database import Database
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    database: Database = request.app.state.database
    connected = await database.ping()
    if not connected:
        logger.warning("Health check: database unreachable")

    health = HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not connected:
        return JSONResponse(status_code=503, content=health.model_dump())
    return health
