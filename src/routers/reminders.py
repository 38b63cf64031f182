"""Reminder sweep endpoints, called by the hourly scheduler."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Query

from src.dependencies import CurrentService, CycleServiceDep
from src.models.cycle import ReminderDecisionRead, ReminderSweepRead

router = APIRouter(prefix="/reminders", tags=["reminders"])
logger = logging.getLogger("cyclecast.routers.reminders")


@router.get("/due", response_model=list[ReminderDecisionRead])
async def due_reminders(
    caller: CurrentService,
    service: CycleServiceDep,
    on: date | None = Query(default=None),
) -> Any:
    decisions = await service.evaluate_due_reminders(today=on)
    return [ReminderDecisionRead.from_decision(d) for d in decisions]


@router.post("/sweep", response_model=ReminderSweepRead)
async def sweep_reminders(caller: CurrentService, service: CycleServiceDep) -> Any:
    logger.info("Reminder sweep requested by %s", caller.subject or caller.role)
    summary = await service.send_due_reminders()
    return ReminderSweepRead.from_summary(summary)
