"""Postgres-backed stores consumed by the cycle service.

Tables (Supabase schema):
    cycle_entries  : (user_id, entry_date, flow_intensity)
    profiles       : (user_id, cycle_length_days, period_length_days)
    predictions    : append-only (user_id, prediction_date, cycle_start_date,
                     cycle_end_date, confidence, source, metadata, created_at)
    reminders      : (id, user_id, reminder_type, schedule_config, enabled, deleted_at)
    user_accounts  : (id, email, deleted_at)

Idempotent prediction writes rely on a unique index on
``predictions (user_id, prediction_date)``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from src.cycle.base import (
    LogEntry,
    PredictionResult,
    Profile,
    ReminderConfig,
    ReminderSchedule,
    ReminderType,
)
from src.cycle.prediction.records import from_record
from src.services.supabase import execute, fetch, fetchrow

logger = logging.getLogger("cyclecast.stores")

_PREDICTION_COLUMNS = """
    prediction_date AS computed_on,
    cycle_start_date AS next_period_start,
    cycle_end_date AS next_period_end,
    confidence,
    source,
    metadata
"""


def _decode_json(value: Any) -> dict:
    if value is None:
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


class LogStore:
    """Read access to a person's flow log."""

    async def recent_entries(self, person_id: UUID, limit: int = 90) -> list[LogEntry]:
        """Most recent ``limit`` entries for ``person_id``, newest first."""
        rows = await fetch(
            """
            SELECT entry_date, flow_intensity FROM cycle_entries
            WHERE user_id = $1
            ORDER BY entry_date DESC
            LIMIT $2
            """,
            person_id, limit,
        )
        return [LogEntry.from_row(r["entry_date"], r["flow_intensity"]) for r in rows]


class ProfileStore:
    """Read access to cycle profiles."""

    async def get_profile(self, person_id: UUID) -> Profile | None:
        row = await fetchrow(
            "SELECT cycle_length_days, period_length_days FROM profiles WHERE user_id = $1",
            person_id,
        )
        if row is None:
            return None
        return Profile(
            cycle_length_days=row["cycle_length_days"],
            period_length_days=row["period_length_days"],
        )

    async def active_person_ids(self) -> list[UUID]:
        """Every non-deleted person that has a profile."""
        rows = await fetch(
            """
            SELECT DISTINCT ua.id FROM user_accounts ua
            INNER JOIN profiles p ON ua.id = p.user_id
            WHERE ua.deleted_at IS NULL
            """
        )
        return [r["id"] for r in rows]


class PredictionStore:
    """Append-only prediction history; the latest row wins on read."""

    async def append(
        self, person_id: UUID, record: dict[str, Any], idempotent: bool = False
    ) -> bool:
        """Insert a prediction record built by ``to_record``.

        Args:
            person_id:  Owner of the prediction.
            record:     Row from ``src.cycle.prediction.records.to_record``.
            idempotent: Skip the insert if a row for (person, computed_on) exists.

        Returns:
            True if a row was written.
        """
        conflict = "ON CONFLICT (user_id, prediction_date) DO NOTHING" if idempotent else ""
        status = await execute(
            f"""
            INSERT INTO predictions (
                user_id, prediction_date, cycle_start_date, cycle_end_date,
                confidence, source, metadata
            ) VALUES ($1, $2, $3, $4, $5, $6, $7::jsonb)
            {conflict}
            """,
            person_id,
            record["computed_on"],
            record["next_period_start"],
            record["next_period_end"],
            record["confidence"],
            record["source"],
            json.dumps(record["metadata"]),
        )
        return status != "INSERT 0 0"

    async def latest(self, person_id: UUID) -> PredictionResult | None:
        row = await fetchrow(
            f"""
            SELECT {_PREDICTION_COLUMNS} FROM predictions
            WHERE user_id = $1
            ORDER BY prediction_date DESC, created_at DESC
            LIMIT 1
            """,
            person_id,
        )
        return from_record(row) if row else None

    async def latest_for(self, person_ids: list[UUID]) -> dict[UUID, PredictionResult]:
        """Latest prediction per person for a batch of people."""
        if not person_ids:
            return {}
        rows = await fetch(
            f"""
            SELECT DISTINCT ON (user_id) user_id, {_PREDICTION_COLUMNS}
            FROM predictions
            WHERE user_id = ANY($1::uuid[])
            ORDER BY user_id, prediction_date DESC, created_at DESC
            """,
            person_ids,
        )
        return {r["user_id"]: from_record(r) for r in rows}


@dataclass
class ReminderRow:
    """An active reminder with its owner's delivery address.

    ``address`` is None when the owner's account is missing or deleted.
    """

    reminder: ReminderConfig
    address: str | None


class ReminderStore:
    """Read-only view of enabled, non-deleted reminders."""

    async def active_reminders(self) -> list[ReminderRow]:
        rows = await fetch(
            """
            SELECT r.id, r.user_id, r.reminder_type, r.schedule_config, r.enabled,
                   ua.email
            FROM reminders r
            LEFT JOIN user_accounts ua ON ua.id = r.user_id AND ua.deleted_at IS NULL
            WHERE r.enabled = true AND r.deleted_at IS NULL
            """
        )

        reminders: list[ReminderRow] = []
        for r in rows:
            try:
                config = ReminderConfig(
                    id=r["id"],
                    type=ReminderType(r["reminder_type"]),
                    schedule=ReminderSchedule.from_dict(_decode_json(r["schedule_config"])),
                    enabled=r["enabled"],
                    person_id=r["user_id"],
                )
            except ValueError as exc:
                logger.warning("Skipping malformed reminder %s: %s", r["id"], exc)
                continue
            reminders.append(ReminderRow(reminder=config, address=r["email"]))
        return reminders
