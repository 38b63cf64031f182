"""CycleCast core: cycle prediction and reminder evaluation.

Everything in this package is pure and synchronous apart from the reminder
dispatcher, which awaits its transport.  Storage, transport and scheduling
live in ``src.services``.

Subpackages:
    prediction : Cycle segmentation, statistics, confidence and projection
    reminders  : Due-check evaluation, message composition and delivery
"""

from src.cycle.base import (
    FlowIntensity,
    InvalidProfileError,
    LogEntry,
    PredictionMetadata,
    PredictionResult,
    PredictionSource,
    Profile,
    ProfileNotFoundError,
    ReminderConfig,
    ReminderFrequency,
    ReminderSchedule,
    ReminderType,
)
from src.cycle.prediction.engine import PredictionEngine
from src.cycle.reminders.evaluator import ReminderDueEvaluator

__all__ = [
    "FlowIntensity",
    "InvalidProfileError",
    "LogEntry",
    "PredictionEngine",
    "PredictionMetadata",
    "PredictionResult",
    "PredictionSource",
    "Profile",
    "ProfileNotFoundError",
    "ReminderConfig",
    "ReminderDueEvaluator",
    "ReminderFrequency",
    "ReminderSchedule",
    "ReminderType",
]
