"""Shared fixtures for the cycle prediction and reminder tests."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from src.cycle.base import LogEntry, Profile
from src.cycle.config_loader import PredictionConfig, load_prediction_config
from src.cycle.prediction.engine import PredictionEngine
from src.cycle.reminders.evaluator import ReminderDueEvaluator

# Fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"

# Canonical "today" for tests that need a fixed calendar day
TEST_TODAY = date(2026, 3, 1)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def prediction_config() -> PredictionConfig:
    """Load the real bundled prediction config for tests."""
    return load_prediction_config()


@pytest.fixture
def engine(prediction_config: PredictionConfig) -> PredictionEngine:
    return PredictionEngine(prediction_config)


@pytest.fixture
def evaluator(prediction_config: PredictionConfig) -> ReminderDueEvaluator:
    return ReminderDueEvaluator(prediction_config)


@pytest.fixture
def profile() -> Profile:
    return Profile(cycle_length_days=28, period_length_days=5)


@pytest.fixture
def today() -> date:
    return TEST_TODAY


# ---------------------------------------------------------------------------
# JSON fixture loaders
# ---------------------------------------------------------------------------


@pytest.fixture
def cycle_logs() -> dict[str, list[LogEntry]]:
    """Named flow logs from fixtures/cycle_logs.json."""
    raw = json.loads((FIXTURES_DIR / "cycle_logs.json").read_text())
    return {
        name: [
            LogEntry.from_row(date.fromisoformat(e["entry_date"]), e["flow_intensity"])
            for e in entries
        ]
        for name, entries in raw.items()
    }
