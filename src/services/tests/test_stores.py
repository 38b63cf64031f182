"""Tests for the Postgres stores with the query helpers patched out."""

from __future__ import annotations

import json
from datetime import date
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from src.cycle.base import (
    FlowIntensity,
    InvalidProfileError,
    PredictionResult,
    PredictionSource,
    Profile,
    ReminderFrequency,
    ReminderType,
)
from src.cycle.prediction.records import to_record
from src.services.stores import (
    LogStore,
    PredictionStore,
    ProfileStore,
    ReminderStore,
)

PREDICTION = PredictionResult(
    next_period_start=date(2026, 3, 29),
    next_period_end=date(2026, 4, 2),
    fertility_window_start=date(2026, 3, 10),
    fertility_window_end=date(2026, 3, 16),
    confidence=0.8,
    source=PredictionSource.hybrid,
)


class TestLogStore:
    @pytest.mark.asyncio
    async def test_rows_become_log_entries(self) -> None:
        person_id = uuid4()
        rows = [
            {"entry_date": date(2026, 2, 2), "flow_intensity": "heavy"},
            {"entry_date": date(2026, 2, 1), "flow_intensity": None},
        ]
        with patch("src.services.stores.fetch", AsyncMock(return_value=rows)) as fetch:
            entries = await LogStore().recent_entries(person_id, limit=30)

        assert [e.flow for e in entries] == [FlowIntensity.heavy, None]
        assert fetch.await_args.args[1:] == (person_id, 30)


class TestProfileStore:
    @pytest.mark.asyncio
    async def test_missing_profile(self) -> None:
        with patch("src.services.stores.fetchrow", AsyncMock(return_value=None)):
            assert await ProfileStore().get_profile(uuid4()) is None

    @pytest.mark.asyncio
    async def test_profile_row(self) -> None:
        row = {"cycle_length_days": 30, "period_length_days": 6}
        with patch("src.services.stores.fetchrow", AsyncMock(return_value=row)):
            assert await ProfileStore().get_profile(uuid4()) == Profile(30, 6)

    @pytest.mark.asyncio
    async def test_active_person_ids(self) -> None:
        ids = [uuid4(), uuid4()]
        rows = [{"id": i} for i in ids]
        with patch("src.services.stores.fetch", AsyncMock(return_value=rows)):
            assert await ProfileStore().active_person_ids() == ids


class TestProfileStoreValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "row",
        [
            {"cycle_length_days": None, "period_length_days": 5},
            {"cycle_length_days": 28, "period_length_days": None},
        ],
    )
    async def test_null_profile_column_is_invalid_profile(self, row: dict) -> None:
        with patch("src.services.stores.fetchrow", AsyncMock(return_value=row)):
            with pytest.raises(InvalidProfileError, match="must be an integer"):
                await ProfileStore().get_profile(uuid4())


class TestPredictionStore:
    @pytest.mark.asyncio
    async def test_append_writes_metadata_json(self) -> None:
        person_id = uuid4()
        record = to_record(PREDICTION, computed_on=date(2026, 3, 1))
        with patch(
            "src.services.stores.execute", AsyncMock(return_value="INSERT 0 1")
        ) as execute:
            written = await PredictionStore().append(person_id, record)

        assert written is True
        query, *params = execute.await_args.args
        assert "ON CONFLICT" not in query
        assert params[:6] == [
            person_id,
            date(2026, 3, 1),
            date(2026, 3, 29),
            date(2026, 4, 2),
            0.8,
            "hybrid",
        ]
        assert json.loads(params[6])["fertility_window_start"] == "2026-03-10"

    @pytest.mark.asyncio
    async def test_idempotent_append_reports_skip(self) -> None:
        record = to_record(PREDICTION, computed_on=date(2026, 3, 1))
        with patch(
            "src.services.stores.execute", AsyncMock(return_value="INSERT 0 0")
        ) as execute:
            written = await PredictionStore().append(uuid4(), record, idempotent=True)

        assert written is False
        assert "ON CONFLICT (user_id, prediction_date) DO NOTHING" in execute.await_args.args[0]

    @pytest.mark.asyncio
    async def test_latest_decodes_row(self) -> None:
        record = to_record(PREDICTION, computed_on=date(2026, 3, 1))
        row = {**record, "metadata": json.dumps(record["metadata"])}
        with patch("src.services.stores.fetchrow", AsyncMock(return_value=row)):
            assert await PredictionStore().latest(uuid4()) == PREDICTION

    @pytest.mark.asyncio
    async def test_latest_without_history(self) -> None:
        with patch("src.services.stores.fetchrow", AsyncMock(return_value=None)):
            assert await PredictionStore().latest(uuid4()) is None

    @pytest.mark.asyncio
    async def test_latest_for_empty_batch_skips_query(self) -> None:
        with patch("src.services.stores.fetch", AsyncMock()) as fetch:
            assert await PredictionStore().latest_for([]) == {}
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_latest_for_keys_by_person(self) -> None:
        person_id = uuid4()
        record = to_record(PREDICTION, computed_on=date(2026, 3, 1))
        rows = [{**record, "user_id": person_id}]
        with patch("src.services.stores.fetch", AsyncMock(return_value=rows)):
            assert await PredictionStore().latest_for([person_id]) == {person_id: PREDICTION}


class TestReminderStore:
    @pytest.mark.asyncio
    async def test_rows_become_reminders(self) -> None:
        reminder_id, person_id = uuid4(), uuid4()
        rows = [
            {
                "id": reminder_id,
                "user_id": person_id,
                "reminder_type": "medication",
                "schedule_config": json.dumps({"time": "08:00", "frequency": "once"}),
                "enabled": True,
                "email": "person@example.com",
            }
        ]
        with patch("src.services.stores.fetch", AsyncMock(return_value=rows)):
            (row,) = await ReminderStore().active_reminders()

        assert row.address == "person@example.com"
        assert row.reminder.id == reminder_id
        assert row.reminder.person_id == person_id
        assert row.reminder.type is ReminderType.medication
        assert row.reminder.schedule.frequency is ReminderFrequency.once

    @pytest.mark.asyncio
    async def test_malformed_reminder_is_skipped(self) -> None:
        rows = [
            {
                "id": uuid4(),
                "user_id": uuid4(),
                "reminder_type": "horoscope",
                "schedule_config": None,
                "enabled": True,
                "email": "person@example.com",
            },
            {
                "id": uuid4(),
                "user_id": uuid4(),
                "reminder_type": "hydration",
                "schedule_config": {},
                "enabled": True,
                "email": None,
            },
        ]
        with patch("src.services.stores.fetch", AsyncMock(return_value=rows)):
            reminders = await ReminderStore().active_reminders()

        assert [r.reminder.type for r in reminders] == [ReminderType.hydration]
        assert reminders[0].address is None
