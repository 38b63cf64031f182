"""Deterministic cycle prediction engine.

Composes segmentation → length statistics → confidence → date projection
into a single ``PredictionResult``.  The engine is stateless: every call is
self-contained given its entries, profile and config, and the only
time-dependent input is ``today`` when a person has no cycle history.

Usage::

    engine = PredictionEngine()
    result = engine.predict(entries, Profile(cycle_length_days=28, period_length_days=5))
    print(result.next_period_start, result.confidence, result.source)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Sequence

from src.cycle.base import (
    FlowIntensity,
    LogEntry,
    PredictionMetadata,
    PredictionResult,
    Profile,
)
from src.cycle.config_loader import PredictionConfig, get_prediction_config
from src.cycle.prediction.confidence import assess_confidence
from src.cycle.prediction.length_stats import compute_length_statistics
from src.cycle.prediction.projector import project_dates, resolve_anchor
from src.cycle.prediction.segmenter import identify_cycle_starts

logger = logging.getLogger("cyclecast.prediction.engine")


@dataclass(frozen=True)
class PredictedWindow:
    """Predicted bleeding window intersected with a calendar range.

    Attributes:
        start: First predicted day of the next period.
        end:   Last predicted day of the next period.
        days:  Predicted days that fall inside the requested range.
    """

    start: date
    end: date
    days: list[date] = field(default_factory=list)


class PredictionEngine:
    """Forecast the next cycle from a flow log and a profile."""

    def __init__(self, config: PredictionConfig | None = None) -> None:
        self._config = config or get_prediction_config()

    @property
    def config(self) -> PredictionConfig:
        return self._config

    def recent_entries(self, entries: Sequence[LogEntry]) -> list[LogEntry]:
        """Return the most recent ``max_entries_analyzed`` entries, newest first."""
        limit = self._config.prediction.max_entries_analyzed
        return sorted(entries, key=lambda e: e.date, reverse=True)[:limit]

    def predict(
        self,
        entries: Sequence[LogEntry],
        profile: Profile,
        today: date | None = None,
    ) -> PredictionResult:
        """Compute the forecast for one person.

        Args:
            entries: Flow log in any order.
            profile: Person's cycle profile (required).
            today:   Anchor used only when no cycle start is found.
                     Defaults to ``date.today()``.

        Returns:
            A new PredictionResult.
        """
        starts = identify_cycle_starts(self.recent_entries(entries))
        stats = compute_length_statistics(starts)
        assessment = assess_confidence(
            stats, profile, self._config.prediction.confidence
        )

        if stats.sample_count:
            metadata = PredictionMetadata(
                cycles_analyzed=stats.sample_count,
                average_cycle_length=stats.mean,
                std_deviation=stats.std_dev,
            )
        else:
            metadata = PredictionMetadata(cycles_analyzed=0)

        base = resolve_anchor(starts, today or date.today())
        dates = project_dates(base, assessment.predicted_length, profile)

        logger.info(
            "Predicted next period %s..%s (source=%s, confidence=%.2f, samples=%d)",
            dates.next_period_start,
            dates.next_period_end,
            assessment.source.value,
            assessment.confidence,
            stats.sample_count,
        )
        return PredictionResult(
            next_period_start=dates.next_period_start,
            next_period_end=dates.next_period_end,
            fertility_window_start=dates.fertility_window_start,
            fertility_window_end=dates.fertility_window_end,
            confidence=assessment.confidence,
            source=assessment.source,
            metadata=metadata,
        )

    def predict_multiple(
        self,
        entries: Sequence[LogEntry],
        profile: Profile,
        cycles: int | None = None,
        today: date | None = None,
    ) -> list[PredictionResult]:
        """Forecast several consecutive cycles.

        After each prediction a synthetic ``medium`` flow day is logged on the
        predicted start (preceded by a ``none`` day when that day is unlogged,
        so the synthetic period opens a new cycle) and the next cycle is
        predicted from the extended log.

        Args:
            entries: Flow log in any order.
            profile: Person's cycle profile.
            cycles:  Number of cycles to forecast (config default when None).
            today:   Anchor for the zero-history case.

        Returns:
            ``cycles`` predictions, nearest first.
        """
        count = cycles if cycles is not None else self._config.prediction.forecast_cycles
        current = list(entries)
        predictions: list[PredictionResult] = []

        for _ in range(count):
            prediction = self.predict(current, profile, today=today)
            predictions.append(prediction)

            start = prediction.next_period_start
            logged = {e.date for e in current}
            synthetic = [LogEntry(date=start, flow=FlowIntensity.medium)]
            if start - timedelta(days=1) not in logged:
                synthetic.append(
                    LogEntry(date=start - timedelta(days=1), flow=FlowIntensity.none)
                )
            current = synthetic + current

        return predictions

    @staticmethod
    def predicted_window_in_range(
        profile: Profile | None,
        entries: Sequence[LogEntry],
        range_start: date,
        range_end: date,
        today: date | None = None,
    ) -> PredictedWindow | None:
        """Predicted period days that fall within a calendar range.

        A lightweight projection for calendar views: the base is the latest
        logged flow day (not the last cycle start) and the profile cycle
        length is always used.

        Args:
            profile:     Person's profile; no window is produced without one.
            entries:     Flow log in any order.
            range_start: First day of the visible range (inclusive).
            range_end:   Last day of the visible range (inclusive).
            today:       Base when no flow day is logged.

        Returns:
            PredictedWindow, or None when ``profile`` is None.
        """
        if profile is None:
            return None

        flow_days = [e.date for e in entries if e.has_flow]
        base = max(flow_days) if flow_days else (today or date.today())

        start = base + timedelta(days=profile.cycle_length_days)
        end = start + timedelta(days=max(profile.period_length_days - 1, 0))

        days: list[date] = []
        day = start
        while day <= end:
            if range_start <= day <= range_end:
                days.append(day)
            day += timedelta(days=1)

        return PredictedWindow(start=start, end=end, days=days)
