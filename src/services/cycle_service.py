"""Cycle service: wires the pure engine to the stores and the transport.

Exposes the two operations the rest of the platform calls:

    compute_prediction(person_id)  : load log + profile, predict, append to history
    send_due_reminders()           : evaluate every active reminder and deliver due ones

plus the batch prediction sweep, multi-cycle forecast and calendar window
used by the API.  Each person is computed independently; a failure for one
person or one reminder never aborts the rest of a sweep.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Awaitable, Callable
from uuid import UUID
from zoneinfo import ZoneInfo

from src.config import Settings, get_settings
from src.cycle.base import (
    LogEntry,
    PredictionResult,
    Profile,
    ProfileNotFoundError,
    ReminderConfig,
)
from src.cycle.prediction.engine import PredictedWindow, PredictionEngine
from src.cycle.prediction.records import to_record
from src.cycle.reminders.dispatcher import (
    DeliveryResult,
    NotificationTransport,
    ReminderDispatcher,
    ReminderJob,
    SweepSummary,
)
from src.cycle.reminders.evaluator import ReminderDecision, ReminderDueEvaluator
from src.services.stores import (
    LogStore,
    PredictionStore,
    ProfileStore,
    ReminderRow,
    ReminderStore,
)

logger = logging.getLogger("cyclecast.service")


@dataclass
class PersonPredictionStatus:
    """Outcome of computing one person's prediction in a batch sweep."""

    person_id: UUID
    status: str  # ok | error
    message: str | None = None
    prediction: PredictionResult | None = None


class CycleService:
    """Prediction and reminder orchestration over the stores."""

    def __init__(
        self,
        logs: LogStore,
        profiles: ProfileStore,
        predictions: PredictionStore,
        reminders: ReminderStore,
        transport: NotificationTransport,
        engine: PredictionEngine | None = None,
        evaluator: ReminderDueEvaluator | None = None,
        settings: Settings | None = None,
        already_delivered: Callable[[ReminderConfig, date], Awaitable[bool]] | None = None,
        on_delivered: Callable[[DeliveryResult, date], Awaitable[None]] | None = None,
    ) -> None:
        self._logs = logs
        self._profiles = profiles
        self._predictions = predictions
        self._reminders = reminders
        self._transport = transport
        self._engine = engine or PredictionEngine()
        self._evaluator = evaluator or ReminderDueEvaluator(self._engine.config)
        self._settings = settings or get_settings()
        self._already_delivered = already_delivered
        self._on_delivered = on_delivered

    def today(self) -> date:
        """Current calendar day in the configured timezone."""
        return datetime.now(ZoneInfo(self._settings.timezone)).date()

    async def _load(self, person_id: UUID) -> tuple[list[LogEntry], Profile]:
        profile = await self._profiles.get_profile(person_id)
        if profile is None:
            raise ProfileNotFoundError(person_id)
        entries = await self._logs.recent_entries(
            person_id, limit=self._settings.prediction_log_window_entries
        )
        return entries, profile

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    async def compute_prediction(
        self, person_id: UUID, today: date | None = None, persist: bool = True
    ) -> PredictionResult:
        """Compute and store a fresh prediction for one person.

        Args:
            person_id: Person to predict for.
            today:     Calendar day of the computation (configured zone's today by default).
            persist:   Append the result to the prediction history.

        Raises:
            ProfileNotFoundError: If the person has no profile.
        """
        today = today or self.today()
        entries, profile = await self._load(person_id)
        prediction = self._engine.predict(entries, profile, today=today)

        if persist:
            written = await self._predictions.append(
                person_id,
                to_record(prediction, computed_on=today),
                idempotent=self._settings.prediction_idempotent_writes,
            )
            if not written:
                logger.info("Prediction for %s on %s already stored", person_id, today)

        logger.info(
            "Computed prediction for %s: start=%s source=%s confidence=%.2f",
            person_id,
            prediction.next_period_start,
            prediction.source.value,
            prediction.confidence,
        )
        return prediction

    async def compute_all_predictions(
        self, today: date | None = None
    ) -> list[PersonPredictionStatus]:
        """Compute predictions for every active person with a profile."""
        today = today or self.today()
        person_ids = await self._profiles.active_person_ids()
        if not person_ids:
            logger.debug("Prediction sweep: no active people")
            return []

        logger.info("Prediction sweep: computing %d people", len(person_ids))
        semaphore = asyncio.Semaphore(self._settings.prediction_max_concurrent)

        async def _run(person_id: UUID) -> PersonPredictionStatus:
            async with semaphore:
                try:
                    prediction = await self.compute_prediction(person_id, today=today)
                except Exception as exc:
                    logger.warning("Prediction failed for %s: %s", person_id, exc)
                    return PersonPredictionStatus(
                        person_id=person_id, status="error", message=str(exc)
                    )
                return PersonPredictionStatus(
                    person_id=person_id, status="ok", prediction=prediction
                )

        statuses = await asyncio.gather(*(_run(pid) for pid in person_ids))
        logger.info(
            "Prediction sweep complete: %d ok, %d errors",
            sum(1 for s in statuses if s.status == "ok"),
            sum(1 for s in statuses if s.status == "error"),
        )
        return list(statuses)

    async def latest_prediction(self, person_id: UUID) -> PredictionResult | None:
        return await self._predictions.latest(person_id)

    async def forecast(
        self, person_id: UUID, cycles: int | None = None, today: date | None = None
    ) -> list[PredictionResult]:
        """Multi-cycle forecast for one person (not persisted)."""
        entries, profile = await self._load(person_id)
        return self._engine.predict_multiple(
            entries, profile, cycles=cycles, today=today or self.today()
        )

    async def predicted_window(
        self,
        person_id: UUID,
        range_start: date,
        range_end: date,
        today: date | None = None,
    ) -> PredictedWindow | None:
        """Predicted period days within a calendar range (None without a profile)."""
        profile = await self._profiles.get_profile(person_id)
        if profile is None:
            return None
        entries = await self._logs.recent_entries(
            person_id, limit=self._settings.prediction_log_window_entries
        )
        return self._engine.predicted_window_in_range(
            profile, entries, range_start, range_end, today=today or self.today()
        )

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    async def _active_reminders(
        self,
    ) -> tuple[list[ReminderRow], dict[UUID, PredictionResult]]:
        rows = await self._reminders.active_reminders()
        person_ids = sorted({r.reminder.person_id for r in rows if r.reminder.person_id})
        latest = await self._predictions.latest_for(person_ids)
        return rows, latest

    async def evaluate_due_reminders(self, today: date | None = None) -> list[ReminderDecision]:
        """Due-check every active reminder without delivering anything.

        Reminders whose owner has no delivery address are still evaluated.
        """
        today = today or self.today()
        rows, latest = await self._active_reminders()
        return self._evaluator.evaluate_all([r.reminder for r in rows], latest, today)

    async def send_due_reminders(self, today: date | None = None) -> SweepSummary:
        """Evaluate every active reminder and deliver the due ones.

        Reminders without a delivery address are logged and left out of the sweep.
        """
        today = today or self.today()
        rows, latest = await self._active_reminders()

        jobs: list[ReminderJob] = []
        for row in rows:
            if row.address is None:
                logger.error("User not found for reminder %s", row.reminder.id)
                continue
            jobs.append(
                ReminderJob(
                    reminder=row.reminder,
                    address=row.address,
                    prediction=latest.get(row.reminder.person_id),
                )
            )

        dispatcher = ReminderDispatcher(
            self._transport,
            evaluator=self._evaluator,
            already_delivered=self._already_delivered,
            on_delivered=self._on_delivered,
            config=self._engine.config,
        )
        return await dispatcher.dispatch(jobs, today)
