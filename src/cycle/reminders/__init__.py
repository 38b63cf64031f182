"""Reminder evaluation and delivery.

Modules:
    evaluator  : Pure due-check of a reminder against a prediction and a day
    composer   : Reminder message text
    dispatcher : Sweep that delivers due reminders through a transport
"""

from src.cycle.reminders.composer import compose_message
from src.cycle.reminders.dispatcher import (
    DeliveryResult,
    NotificationTransport,
    ReminderDispatcher,
    ReminderJob,
    SweepSummary,
)
from src.cycle.reminders.evaluator import (
    ReminderDecision,
    ReminderDueEvaluator,
    evaluate_due_reminders,
)

__all__ = [
    "compose_message",
    "DeliveryResult",
    "NotificationTransport",
    "ReminderDecision",
    "ReminderDispatcher",
    "ReminderDueEvaluator",
    "ReminderJob",
    "SweepSummary",
    "evaluate_due_reminders",
]
