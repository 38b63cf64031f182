"""Reminder due-check evaluator.

A pure decision of whether a reminder fires on a given calendar day:

1. Disabled reminders never fire.
2. ``medication`` / ``hydration`` fire every day while their frequency is
   ``daily``; they never need a prediction.
3. Cycle-based reminders need a prediction; without one they are skipped.
4. ``period_start`` / ``period_end`` / ``fertile_window`` fire exactly
   ``days_before`` days (default 3) before the matching predicted date.
5. ``custom`` reminders have no built-in date rule and never fire here.

Only calendar dates are compared; the schedule ``time`` is left to the
delivery layer.  Nothing here remembers what was already sent, so
repeated sweeps on the same day fire again (see ReminderDispatcher's
``already_delivered`` hook).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping, Sequence
from uuid import UUID

from src.cycle.base import (
    HABIT_REMINDER_TYPES,
    PredictionResult,
    ReminderConfig,
    ReminderFrequency,
    ReminderType,
)
from src.cycle.config_loader import PredictionConfig, get_prediction_config
from src.cycle.reminders.composer import compose_message

logger = logging.getLogger("cyclecast.reminders.evaluator")


@dataclass(frozen=True)
class ReminderDecision:
    """Due-check outcome for one reminder."""

    reminder_id: UUID
    due: bool
    message: str


class ReminderDueEvaluator:
    """Decide whether reminders are due on a given day."""

    def __init__(self, config: PredictionConfig | None = None) -> None:
        self._config = config or get_prediction_config()

    def trigger_date(
        self, reminder: ReminderConfig, prediction: PredictionResult
    ) -> date | None:
        """Calendar day a cycle-based reminder fires on, if it has one."""
        days_before = reminder.schedule.days_before
        if days_before is None:
            days_before = self._config.reminders.default_days_before

        if reminder.type is ReminderType.period_start:
            target = prediction.next_period_start
        elif reminder.type is ReminderType.period_end:
            target = prediction.next_period_end
        elif reminder.type is ReminderType.fertile_window:
            target = prediction.fertility_window_start
        else:
            return None

        if target is None:
            return None
        return target - timedelta(days=days_before)

    def is_due(
        self,
        reminder: ReminderConfig,
        prediction: PredictionResult | None,
        today: date,
    ) -> bool:
        """Return True if ``reminder`` fires on ``today``.

        Args:
            reminder:   Reminder configuration.
            prediction: Latest prediction for the reminder's owner, if any.
            today:      Calendar day being evaluated.
        """
        if not reminder.enabled:
            return False

        if reminder.type in HABIT_REMINDER_TYPES:
            frequency = reminder.schedule.frequency or self._config.reminders.default_frequency
            return frequency is ReminderFrequency.daily

        if prediction is None:
            logger.debug("Reminder %s skipped: no prediction yet", reminder.id)
            return False

        trigger = self.trigger_date(reminder, prediction)
        return trigger is not None and trigger == today

    def evaluate(
        self,
        reminder: ReminderConfig,
        prediction: PredictionResult | None,
        today: date,
    ) -> ReminderDecision:
        """Due-check one reminder and compose its message."""
        return ReminderDecision(
            reminder_id=reminder.id,
            due=self.is_due(reminder, prediction, today),
            message=compose_message(reminder, prediction),
        )

    def evaluate_all(
        self,
        reminders: Sequence[ReminderConfig],
        predictions: Mapping[UUID, PredictionResult],
        today: date,
    ) -> list[ReminderDecision]:
        """Due-check a batch of reminders.

        Args:
            reminders:   Enabled, non-deleted reminders to check.
            predictions: Latest prediction per person id.
            today:       Calendar day being evaluated.

        Returns:
            One ReminderDecision per reminder, in input order.
        """
        decisions = [
            self.evaluate(
                reminder,
                predictions.get(reminder.person_id) if reminder.person_id else None,
                today,
            )
            for reminder in reminders
        ]
        logger.info(
            "Evaluated %d reminder(s) for %s: %d due",
            len(decisions),
            today,
            sum(1 for d in decisions if d.due),
        )
        return decisions


def evaluate_due_reminders(
    reminders: Sequence[ReminderConfig],
    predictions: Mapping[UUID, PredictionResult],
    today: date,
    config: PredictionConfig | None = None,
) -> list[ReminderDecision]:
    """Convenience wrapper around ``ReminderDueEvaluator.evaluate_all``."""
    return ReminderDueEvaluator(config).evaluate_all(reminders, predictions, today)
