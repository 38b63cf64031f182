"""Pydantic request/response schemas for predictions and reminders."""

from __future__ import annotations

import uuid
from datetime import date

from pydantic import Field

from src.cycle.base import (
    MAX_CYCLE_LENGTH_DAYS,
    MAX_PERIOD_LENGTH_DAYS,
    MIN_CYCLE_LENGTH_DAYS,
    MIN_PERIOD_LENGTH_DAYS,
    FlowIntensity,
    LogEntry,
    PredictionResult,
    PredictionSource,
    Profile,
)
from src.cycle.prediction.engine import PredictedWindow
from src.cycle.reminders.dispatcher import DeliveryResult, SweepSummary
from src.cycle.reminders.evaluator import ReminderDecision
from src.models.base import CycleCastBase


# ---------- Inputs ----------

class ProfileIn(CycleCastBase):
    cycle_length_days: int = Field(
        default=28, ge=MIN_CYCLE_LENGTH_DAYS, le=MAX_CYCLE_LENGTH_DAYS
    )
    period_length_days: int = Field(
        default=5, ge=MIN_PERIOD_LENGTH_DAYS, le=MAX_PERIOD_LENGTH_DAYS
    )

    def to_profile(self) -> Profile:
        return Profile(
            cycle_length_days=self.cycle_length_days,
            period_length_days=self.period_length_days,
        )


class LogEntryIn(CycleCastBase):
    entry_date: date
    flow_intensity: FlowIntensity | None = None

    def to_entry(self) -> LogEntry:
        return LogEntry(date=self.entry_date, flow=self.flow_intensity)


class ComputePredictionRequest(CycleCastBase):
    person_id: uuid.UUID


class PreviewPredictionRequest(CycleCastBase):
    """Run the engine on supplied data without touching any store."""

    profile: ProfileIn
    entries: list[LogEntryIn] = Field(default_factory=list)
    today: date | None = None
    cycles: int = Field(default=1, ge=1, le=12)


# ---------- Predictions ----------

class PredictionMetadataRead(CycleCastBase):
    cycles_analyzed: int
    average_cycle_length: float | None = None
    std_deviation: float | None = None


class PredictionRead(CycleCastBase):
    next_period_start: date
    next_period_end: date
    fertility_window_start: date | None = None
    fertility_window_end: date | None = None
    confidence: float = Field(ge=0, le=1)
    source: PredictionSource
    metadata: PredictionMetadataRead

    @classmethod
    def from_result(cls, result: PredictionResult) -> PredictionRead:
        return cls(
            next_period_start=result.next_period_start,
            next_period_end=result.next_period_end,
            fertility_window_start=result.fertility_window_start,
            fertility_window_end=result.fertility_window_end,
            confidence=result.confidence,
            source=result.source,
            metadata=PredictionMetadataRead(
                cycles_analyzed=result.metadata.cycles_analyzed,
                average_cycle_length=result.metadata.average_cycle_length,
                std_deviation=result.metadata.std_deviation,
            ),
        )


class ForecastRead(CycleCastBase):
    person_id: uuid.UUID | None = None
    predictions: list[PredictionRead]


class PersonPredictionStatusRead(CycleCastBase):
    person_id: uuid.UUID
    status: str
    message: str | None = None
    prediction: PredictionRead | None = None


class PredictedWindowRead(CycleCastBase):
    start: date
    end: date
    days: list[date]

    @classmethod
    def from_window(cls, window: PredictedWindow) -> PredictedWindowRead:
        return cls(start=window.start, end=window.end, days=list(window.days))


# ---------- Reminders ----------

class ReminderDecisionRead(CycleCastBase):
    reminder_id: uuid.UUID
    due: bool
    message: str

    @classmethod
    def from_decision(cls, decision: ReminderDecision) -> ReminderDecisionRead:
        return cls(
            reminder_id=decision.reminder_id,
            due=decision.due,
            message=decision.message,
        )


class DeliveryResultRead(CycleCastBase):
    reminder_id: uuid.UUID
    person_id: uuid.UUID | None = None
    reminder_type: str
    sent: bool
    message: str
    error: str | None = None

    @classmethod
    def from_result(cls, result: DeliveryResult) -> DeliveryResultRead:
        return cls(
            reminder_id=result.reminder_id,
            person_id=result.person_id,
            reminder_type=result.reminder_type,
            sent=result.sent,
            message=result.message,
            error=result.error,
        )


class ReminderSweepRead(CycleCastBase):
    processed: int
    sent: int
    failed: int
    skipped_already: int
    results: list[DeliveryResultRead]

    @classmethod
    def from_summary(cls, summary: SweepSummary) -> ReminderSweepRead:
        return cls(
            processed=summary.processed,
            sent=summary.sent,
            failed=summary.failed,
            skipped_already=summary.skipped_already,
            results=[DeliveryResultRead.from_result(r) for r in summary.results],
        )
