"""Canonical data models for the CycleCast prediction engine.

These types are the single source of truth passed between the segmenter,
statistics, confidence model, projector, reminder evaluator and the store
adapters.  The engine never mutates them: every computation produces a new
``PredictionResult``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any
from uuid import UUID

logger = logging.getLogger("cyclecast.cycle")

# Accepted profile ranges (mirrors the profiles table check constraints)
MIN_CYCLE_LENGTH_DAYS = 21
MAX_CYCLE_LENGTH_DAYS = 35
MIN_PERIOD_LENGTH_DAYS = 3
MAX_PERIOD_LENGTH_DAYS = 10


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class FlowIntensity(str, Enum):
    light = "light"
    medium = "medium"
    heavy = "heavy"
    spotting = "spotting"
    none = "none"


class PredictionSource(str, Enum):
    historical = "historical"
    hybrid = "hybrid"
    profile_default = "profile_default"


class ReminderType(str, Enum):
    period_start = "period_start"
    period_end = "period_end"
    fertile_window = "fertile_window"
    medication = "medication"
    hydration = "hydration"
    custom = "custom"


class ReminderFrequency(str, Enum):
    daily = "daily"
    once = "once"


# Reminder types that fire on a fixed habit, independent of any forecast
HABIT_REMINDER_TYPES = frozenset({ReminderType.medication, ReminderType.hydration})


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ProfileNotFoundError(LookupError):
    """Raised when a person has no cycle profile on record."""

    def __init__(self, person_id: UUID | str) -> None:
        super().__init__(f"Profile not found for person {person_id}")
        self.person_id = person_id


class InvalidProfileError(ValueError):
    """Raised when profile values fall outside the accepted ranges."""


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LogEntry:
    """One daily flow observation.

    Attributes:
        date: Calendar day the observation refers to.
        flow: Logged flow intensity, or None when the day was logged without one.
    """

    date: date
    flow: FlowIntensity | None = None

    @property
    def has_flow(self) -> bool:
        return self.flow is not None and self.flow is not FlowIntensity.none

    @classmethod
    def from_row(cls, entry_date: date, flow_intensity: str | None) -> LogEntry:
        """Build a LogEntry from a ``cycle_entries`` row.

        Raises:
            ValueError: If ``flow_intensity`` is not a known intensity.
        """
        flow = FlowIntensity(flow_intensity) if flow_intensity is not None else None
        return cls(date=entry_date, flow=flow)


@dataclass(frozen=True)
class Profile:
    """Per-person defaults used when logged history is insufficient."""

    cycle_length_days: int = 28
    period_length_days: int = 5

    def __post_init__(self) -> None:
        for name in ("cycle_length_days", "period_length_days"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidProfileError(f"{name} must be an integer, got {value!r}")
        if not MIN_CYCLE_LENGTH_DAYS <= self.cycle_length_days <= MAX_CYCLE_LENGTH_DAYS:
            raise InvalidProfileError(
                f"cycle_length_days={self.cycle_length_days} is out of range "
                f"[{MIN_CYCLE_LENGTH_DAYS}, {MAX_CYCLE_LENGTH_DAYS}]"
            )
        if not MIN_PERIOD_LENGTH_DAYS <= self.period_length_days <= MAX_PERIOD_LENGTH_DAYS:
            raise InvalidProfileError(
                f"period_length_days={self.period_length_days} is out of range "
                f"[{MIN_PERIOD_LENGTH_DAYS}, {MAX_PERIOD_LENGTH_DAYS}]"
            )


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PredictionMetadata:
    """Evidence summary attached to a prediction.

    Attributes:
        cycles_analyzed:      Number of cycle-length samples used.
        average_cycle_length: Mean sample length (absent for profile defaults).
        std_deviation:        Sample standard deviation (absent for profile defaults).
    """

    cycles_analyzed: int = 0
    average_cycle_length: float | None = None
    std_deviation: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"cycles_analyzed": self.cycles_analyzed}
        if self.average_cycle_length is not None:
            data["average_cycle_length"] = self.average_cycle_length
        if self.std_deviation is not None:
            data["std_deviation"] = self.std_deviation
        return data


@dataclass(frozen=True)
class PredictionResult:
    """Forecast for a person's next cycle.

    Freshly computed results always carry both fertility dates.  Results read
    back from the prediction store may lack them (older rows), which is why
    they are optional here.
    """

    next_period_start: date
    next_period_end: date
    fertility_window_start: date | None
    fertility_window_end: date | None
    confidence: float
    source: PredictionSource
    metadata: PredictionMetadata = field(default_factory=PredictionMetadata)


# ---------------------------------------------------------------------------
# Reminders
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReminderSchedule:
    """Schedule settings stored in ``reminders.schedule_config``.

    ``time`` is informational for the delivery layer and never evaluated here.
    """

    time: str | None = None
    days_before: int | None = None
    frequency: ReminderFrequency | None = None
    custom_message: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> ReminderSchedule:
        raw = raw or {}
        frequency = raw.get("frequency")
        days_before = raw.get("days_before")
        return cls(
            time=raw.get("time"),
            days_before=int(days_before) if days_before is not None else None,
            frequency=ReminderFrequency(frequency) if frequency else None,
            custom_message=raw.get("custom_message") or None,
        )


@dataclass(frozen=True)
class ReminderConfig:
    """A reminder as read from the reminder store."""

    id: UUID
    type: ReminderType
    schedule: ReminderSchedule = field(default_factory=ReminderSchedule)
    enabled: bool = True
    person_id: UUID | None = None
