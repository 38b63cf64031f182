"""Liveness endpoint for the scheduler and load balancer (no auth)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from src.config import get_settings
from src.cycle.config_loader import get_prediction_config
from src.services.supabase import get_pool

router = APIRouter(tags=["system"])
logger = logging.getLogger("cyclecast.health")


async def _database_reachable() -> bool:
    try:
        async with get_pool().acquire() as conn:
            await conn.fetchval("SELECT 1")
    except Exception as exc:
        logger.warning("Database probe failed: %s", exc)
        return False
    return True


@router.get("/health")
async def health_check() -> dict:
    """Report process, database and engine configuration state.

    Always answers 200 while the process is up; ``status`` drops to
    ``degraded`` when the database cannot be reached.
    """
    settings = get_settings()
    config = get_prediction_config()
    db_ok = await _database_reachable()

    return {
        "status": "healthy" if db_ok else "degraded",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected" if db_ok else "unreachable",
        "prediction_config": config.version,
        "reminder_transport": (
            "email" if settings.email_service_url and settings.email_api_key else "log"
        ),
        "timezone": settings.timezone,
        "checked_at": datetime.now(timezone.utc).isoformat(),
    }
