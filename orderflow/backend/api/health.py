"""
Health probes.

- /health: liveness, no dependencies touched
- /health/ready: 503 when the database (or an enabled Telegram channel) is unhealthy
- /health/detailed: every component plus application identity
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import text

from orderflow.backend.core.config import get_app_config, get_settings
from orderflow.backend.core.database import get_session_factory
from orderflow.backend.core.logging import get_logger
from orderflow.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)

NOT_RUN: dict[str, Any] = {"status": "error", "error": "check did not run"}


async def check_database() -> dict[str, Any]:
    """SELECT 1 through the session factory; reports latency in ms."""
    try:
        if not get_app_config().database.name:
            return {"status": "not_configured"}
        started = utc_now()
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}
    return {"status": "healthy", "latency_ms": int((utc_now() - started).total_seconds() * 1000)}


async def check_telegram() -> dict[str, Any]:
    # Configuration only; Telegram's own availability is not probed.
    if not get_app_config().features.channel_telegram_enabled:
        return {"status": "disabled"}
    if not get_settings().telegram_bot_token:
        return {"status": "unhealthy", "error": "TELEGRAM_BOT_TOKEN not configured"}
    return {"status": "healthy"}


async def _run_checks(timeout: float | None = None) -> dict[str, dict[str, Any]]:
    """Run every component check concurrently; a crashed or timed-out check stays NOT_RUN."""
    checks: dict[str, Callable[[], Awaitable[dict[str, Any]]]] = {
        "database": check_database,
        "telegram": check_telegram,
    }
    results = {name: dict(NOT_RUN) for name in checks}
    try:
        async with asyncio.timeout(timeout):
            async with asyncio.TaskGroup() as tg:
                tasks = {name: tg.create_task(check()) for name, check in checks.items()}
        results.update({name: task.result() for name, task in tasks.items()})
    except* Exception as eg:
        for exc in eg.exceptions:
            logger.warning("Health check task failed", extra={"error": repr(exc)})
    return results


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    timeout = get_app_config().observability.health_checks.ready_timeout_seconds
    checks = await _run_checks(timeout)

    unhealthy = [name for name, check in checks.items() if check.get("status") == "unhealthy"]
    body = {
        "status": "unhealthy" if unhealthy else "healthy",
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }
    if unhealthy:
        logger.warning("Readiness check failed", extra={"unhealthy": unhealthy})
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=body)
    return body


@router.get("/health/detailed")
async def detailed_health_check() -> dict[str, Any]:
    checks = await _run_checks()
    application = get_app_config().application
    failing = {"unhealthy", "error"} & {check.get("status") for check in checks.values()}
    return {
        "status": "unhealthy" if failing else "healthy",
        "application": {
            "name": application.name,
            "env": application.environment,
            "debug": application.debug,
            "version": application.version,
        },
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }
