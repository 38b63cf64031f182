"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request

from src.config import Settings, get_settings
from src.services.cycle_service import CycleService
from src.services.notifier import build_transport
from src.services.stores import LogStore, PredictionStore, ProfileStore, ReminderStore


@dataclass(frozen=True)
class ServiceContext:
    """Caller identity extracted from a verified service-role JWT."""

    role: str
    subject: str | None = None


async def get_service_context(request: Request) -> ServiceContext:
    """Return the caller identity set by the service auth middleware."""
    auth: ServiceContext | None = getattr(request.state, "auth", None)
    if auth is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return auth


def get_cycle_service(settings: Settings = Depends(get_settings)) -> CycleService:
    return CycleService(
        logs=LogStore(),
        profiles=ProfileStore(),
        predictions=PredictionStore(),
        reminders=ReminderStore(),
        transport=build_transport(settings),
        settings=settings,
    )


# Annotated shortcuts for route signatures
CurrentService = Annotated[ServiceContext, Depends(get_service_context)]
CycleServiceDep = Annotated[CycleService, Depends(get_cycle_service)]
AppSettings = Annotated[Settings, Depends(get_settings)]
