"""
Health Check Endpoints.

    /health           liveness, no dependencies touched
    /health/ready     503 unless the database answers within timeouts.database
    /health/detailed  every check plus application identity and feature flags

A check returns {"status": "healthy" | "unhealthy" | "disabled", ...}.
"""

import asyncio
import time
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from notekeeper.backend.core.config import get_app_config
from notekeeper.backend.core.logging import get_logger
from notekeeper.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"
DISABLED = "disabled"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


async def check_database() -> dict[str, Any]:
    from notekeeper.backend.core.database import get_session_factory

    started = time.perf_counter()
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {"status": UNHEALTHY, "error": str(e)}
    return {"status": HEALTHY, "latency_ms": _elapsed_ms(started)}


async def check_event_broker() -> dict[str, Any]:
    """Ping Redis through the event broker. Skipped while publishing is off."""
    if not get_app_config().features.events_publish_enabled:
        return {"status": DISABLED}

    from notekeeper.backend.events.broker import ensure_connected

    started = time.perf_counter()
    try:
        broker = await ensure_connected()
        reachable = await broker.ping(timeout=get_app_config().application.timeouts.external_api)
    except Exception as e:
        logger.warning("Event broker health check failed", extra={"error": str(e)})
        return {"status": UNHEALTHY, "error": str(e)}
    if not reachable:
        return {"status": UNHEALTHY, "error": "ping failed"}
    return {"status": HEALTHY, "latency_ms": _elapsed_ms(started)}


def _overall(checks: dict[str, dict[str, Any]]) -> str:
    return UNHEALTHY if any(c["status"] == UNHEALTHY for c in checks.values()) else HEALTHY


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": HEALTHY}


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    try:
        async with asyncio.timeout(get_app_config().application.timeouts.database):
            database = await check_database()
    except TimeoutError:
        database = {"status": UNHEALTHY, "error": "timed out"}

    checks = {"database": database}
    body = {"status": _overall(checks), "checks": checks, "timestamp": utc_now().isoformat()}

    if body["status"] == UNHEALTHY:
        logger.warning("Readiness check failed", extra={"checks": checks})
        raise HTTPException(status_code=503, detail=body)
    return body


@router.get("/health/detailed")
async def detailed_health_check() -> dict[str, Any]:
    app_config = get_app_config()
    application = app_config.application

    checks = {
        "database": await check_database(),
        "events": await check_event_broker(),
    }

    return {
        "status": _overall(checks),
        "application": {
            "name": application.name,
            "env": application.environment,
            "debug": application.debug,
            "version": application.version,
        },
        "features": app_config.features.model_dump(),
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }
