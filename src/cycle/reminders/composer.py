"""Human-readable reminder text."""

from __future__ import annotations

from src.cycle.base import PredictionResult, ReminderConfig, ReminderType

MEDICATION_MESSAGE = "Time to take your medication."
HYDRATION_MESSAGE = "Remember to stay hydrated!"
DEFAULT_MESSAGE = "Reminder notification"


def compose_message(
    reminder: ReminderConfig, prediction: PredictionResult | None
) -> str:
    """Build the message for ``reminder``.

    A custom message always wins.  Cycle-based types quote the relevant
    predicted date and fall back to a generic line without a prediction.
    """
    if reminder.schedule.custom_message:
        return reminder.schedule.custom_message

    if reminder.type is ReminderType.period_start:
        if prediction is None:
            return "Period reminder"
        return (
            f"Your period is expected to start around "
            f"{prediction.next_period_start.isoformat()}. Stay prepared!"
        )

    if reminder.type is ReminderType.period_end:
        if prediction is None:
            return "Period end reminder"
        return (
            f"Your period is expected to end around "
            f"{prediction.next_period_end.isoformat()}."
        )

    if reminder.type is ReminderType.fertile_window:
        if prediction is None or prediction.fertility_window_start is None:
            return "Fertility window reminder"
        return (
            f"Your fertile window starts around "
            f"{prediction.fertility_window_start.isoformat()}."
        )

    if reminder.type is ReminderType.medication:
        return MEDICATION_MESSAGE

    if reminder.type is ReminderType.hydration:
        return HYDRATION_MESSAGE

    return DEFAULT_MESSAGE
