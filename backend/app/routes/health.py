"""
Notewise Backend - Health Check Route
======================================

What:  Health check endpoint for monitoring and container probes.
How:   Checks the database and the Gemini API and returns an aggregate status.
Who:   Called by Docker health checks and uptime monitors.

Status levels:
    healthy:   Database reachable, Gemini reachable
    degraded:  Database reachable, Gemini unreachable or not configured
               (note CRUD still works; AI actions do not)
    unhealthy: Database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from app import __version__
from app.database import engine
from app.schemas.note import HealthResponse
from app.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the health status of the backend service and its dependencies.",
)
async def health_check(response: Response) -> HealthResponse:
    """
    Probe each dependency with the cheapest call that proves it works.

    Database: SELECT 1
    Gemini:   list_models() (authenticates the key, consumes no tokens)
    """
    db_status = "connected"
    gemini_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Gemini API ──────────────────────────────────────────────────
    if not gemini_service.is_configured:
        gemini_status = "not_configured"
    elif not await gemini_service.health_check():
        gemini_status = "unavailable"

    if gemini_status != "available" and overall == "healthy":
        overall = "degraded"

    if overall == "unhealthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        gemini=gemini_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
