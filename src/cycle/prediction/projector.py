"""Date projection: turn a cycle length and anchor date into a forecast.

The fertility window is anchored to the same base date as the period
projection (the last observed cycle start), not to the projected next start.
With long histories this can place the window before "today".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from src.cycle.base import Profile
from src.cycle.prediction.length_stats import round_half_up

# Fertility window bounds relative to the estimated ovulation day
FERTILE_DAYS_BEFORE_OVULATION = 5
FERTILE_DAYS_AFTER_OVULATION = 1


@dataclass(frozen=True)
class ProjectedDates:
    next_period_start: date
    next_period_end: date
    fertility_window_start: date
    fertility_window_end: date


def resolve_anchor(cycle_starts: list[date], today: date) -> date:
    """Most recent cycle start, or ``today`` when there is no history."""
    return cycle_starts[-1] if cycle_starts else today


def ovulation_offset(predicted_length: int) -> int:
    """Estimated ovulation day, counted from the anchor."""
    return int(round_half_up(predicted_length / 2))


def project_dates(base: date, predicted_length: int, profile: Profile) -> ProjectedDates:
    """Project the next period and the fertility window from ``base``.

    Args:
        base:             Anchor date (last cycle start or today).
        predicted_length: Cycle length to project, in days.
        profile:          Supplies the period length.

    Returns:
        ProjectedDates where the period spans ``profile.period_length_days``
        days inclusive and the fertility window spans 7 days inclusive.
    """
    ovulation_day = ovulation_offset(predicted_length)
    return ProjectedDates(
        next_period_start=base + timedelta(days=predicted_length),
        next_period_end=base + timedelta(
            days=predicted_length + profile.period_length_days - 1
        ),
        fertility_window_start=base + timedelta(
            days=ovulation_day - FERTILE_DAYS_BEFORE_OVULATION
        ),
        fertility_window_end=base + timedelta(
            days=ovulation_day + FERTILE_DAYS_AFTER_OVULATION
        ),
    )
