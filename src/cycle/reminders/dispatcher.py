"""Deliver due reminders through a notification transport.

The dispatcher walks a batch of reminder jobs, asks the evaluator which are
due today, composes their messages and hands them to the transport one at a
time.  A failure for one reminder is recorded on its DeliveryResult and the
sweep carries on with the rest.

Delivery state is not tracked here.  Pass ``already_delivered`` to suppress
re-sends when a sweep reruns within the same due window, and
``on_delivered`` to record successful sends.  A hook that raises is logged
and noted on that reminder's DeliveryResult; the sweep continues.

Usage::

    dispatcher = ReminderDispatcher(
        transport=EmailTransport(url, api_key),
        already_delivered=delivery_log.was_sent_today,
        on_delivered=delivery_log.record,
    )
    summary = await dispatcher.dispatch(jobs, today=date(2026, 3, 26))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Awaitable, Callable, Protocol, Sequence
from uuid import UUID

from src.cycle.base import PredictionResult, ReminderConfig
from src.cycle.config_loader import PredictionConfig, get_prediction_config
from src.cycle.reminders.evaluator import ReminderDueEvaluator

logger = logging.getLogger("cyclecast.reminders.dispatcher")


class NotificationTransport(Protocol):
    """Anything that can deliver a message to an address."""

    async def send(self, address: str, subject: str, body: str) -> bool:
        """Deliver one message. Returns True on success."""
        ...


@dataclass
class ReminderJob:
    """A reminder ready for the sweep.

    Attributes:
        reminder:   Reminder configuration.
        address:    Where to deliver (the owner's email).
        prediction: Latest prediction for the owner, if any.
    """

    reminder: ReminderConfig
    address: str
    prediction: PredictionResult | None = None


@dataclass
class DeliveryResult:
    """Outcome of delivering one due reminder.

    Attributes:
        reminder_id:   Reminder UUID.
        person_id:     Owner UUID.
        reminder_type: Reminder type slug.
        sent:          True if the transport accepted the message.
        message:       Composed message text.
        error:         Why delivery failed, or why a sent message went unrecorded.
    """

    reminder_id: UUID
    person_id: UUID | None
    reminder_type: str
    sent: bool
    message: str
    error: str | None = None


@dataclass
class SweepSummary:
    """Result of one reminder sweep.

    Attributes:
        processed:       Reminders examined.
        skipped_already: Due reminders suppressed by ``already_delivered``.
        results:         One DeliveryResult per attempted delivery.
    """

    processed: int = 0
    skipped_already: int = 0
    results: list[DeliveryResult] = field(default_factory=list)

    @property
    def sent(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.sent)


class ReminderDispatcher:
    """Evaluate and deliver reminders with per-reminder failure isolation."""

    def __init__(
        self,
        transport: NotificationTransport,
        evaluator: ReminderDueEvaluator | None = None,
        already_delivered: Callable[[ReminderConfig, date], Awaitable[bool]] | None = None,
        on_delivered: Callable[[DeliveryResult, date], Awaitable[None]] | None = None,
        config: PredictionConfig | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            transport:         Delivery channel for composed messages.
            evaluator:         Due-check evaluator (built from ``config`` if omitted).
            already_delivered: Async predicate(reminder, today) → True when the
                               reminder was already sent for ``today``.
            on_delivered:      Async callback(result, today) after a successful send.
            config:            Prediction config (subject template, defaults).
        """
        self._config = config or get_prediction_config()
        self._transport = transport
        self._evaluator = evaluator or ReminderDueEvaluator(self._config)
        self._already_delivered = already_delivered
        self._on_delivered = on_delivered

    async def dispatch(self, jobs: Sequence[ReminderJob], today: date) -> SweepSummary:
        """Deliver every job that is due on ``today``.

        Returns:
            SweepSummary covering all jobs.
        """
        summary = SweepSummary(processed=len(jobs))

        for job in jobs:
            decision = self._evaluator.evaluate(job.reminder, job.prediction, today)
            if not decision.due:
                continue

            if self._already_delivered:
                try:
                    delivered = await self._already_delivered(job.reminder, today)
                except Exception as exc:
                    # Unknown delivery state: do not risk a duplicate send
                    logger.error(
                        "Delivery check for reminder %s raised: %s", job.reminder.id, exc
                    )
                    error = f"delivery check failed: {exc}"
                    summary.results.append(self._result(job, decision.message, error=error))
                    continue
                if delivered:
                    logger.debug("Reminder %s already delivered for %s", job.reminder.id, today)
                    summary.skipped_already += 1
                    continue

            result = await self._deliver(job, decision.message)
            summary.results.append(result)

            if result.sent and self._on_delivered:
                try:
                    await self._on_delivered(result, today)
                except Exception as exc:
                    logger.error(
                        "Recording delivery of reminder %s raised: %s", job.reminder.id, exc
                    )
                    result.error = f"delivery not recorded: {exc}"

        logger.info(
            "Reminder sweep for %s: %d processed, %d sent, %d failed, %d already delivered",
            today,
            summary.processed,
            summary.sent,
            summary.failed,
            summary.skipped_already,
        )
        return summary

    @staticmethod
    def _result(job: ReminderJob, message: str, error: str | None = None) -> DeliveryResult:
        return DeliveryResult(
            reminder_id=job.reminder.id,
            person_id=job.reminder.person_id,
            reminder_type=job.reminder.type.value,
            sent=False,
            message=message,
            error=error,
        )

    async def _deliver(self, job: ReminderJob, message: str) -> DeliveryResult:
        reminder = job.reminder
        result = self._result(job, message)
        subject = self._config.reminders.subject_for(reminder.type.value)

        try:
            result.sent = await self._transport.send(job.address, subject, message)
        except Exception as exc:
            logger.error("Delivery of reminder %s raised: %s", reminder.id, exc)
            result.error = str(exc)
            return result

        if not result.sent:
            logger.warning("Delivery of reminder %s failed", reminder.id)
        return result
