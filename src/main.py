"""CycleCast API: cycle predictions and reminder sweeps over HTTP.

Run locally:
    uvicorn src.main:app --reload --port 8000

The scheduler calls ``POST /api/v1/predictions/compute-all`` daily and
``POST /api/v1/reminders/sweep`` hourly with a service-role token.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import Settings, get_settings
from src.cycle.config_loader import get_prediction_config
from src.middleware.service_auth import ServiceAuthMiddleware
from src.routers import health, predictions, reminders
from src.services.supabase import close_pool, init_pool

API_V1_PREFIX = "/api/v1"

logger = logging.getLogger("cyclecast")


def configure_logging(settings: Settings) -> None:
    """Route every ``cyclecast.*`` logger to stdout at the configured level."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    # A broken prediction_config.yaml should stop the deploy, not the first sweep
    config = get_prediction_config()
    logger.info(
        "Starting %s v%s [%s], prediction config v%s, zone %s",
        settings.app_name,
        settings.app_version,
        settings.environment,
        config.version,
        settings.timezone,
    )
    await init_pool(settings)
    try:
        yield
    finally:
        await close_pool()
        logger.info("%s shut down", settings.app_name)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Override settings (tests); the cached env settings by default.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description=(
            "Next-period and fertile-window forecasts computed from daily flow "
            "logs, plus due-checks and delivery for cycle and habit reminders."
        ),
        version=settings.app_version,
        lifespan=lifespan,
    )

    # Added last runs first: CORS answers preflight before auth sees it
    app.add_middleware(ServiceAuthMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.include_router(health.router)
    for router in (predictions.router, reminders.router):
        app.include_router(router, prefix=API_V1_PREFIX)

    return app


app = create_app()
