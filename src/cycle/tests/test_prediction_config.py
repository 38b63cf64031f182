"""Tests for prediction_config.yaml loading and validation."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from src.cycle.base import ReminderFrequency
from src.cycle.config_loader import (
    ConfigValidationError,
    PredictionConfig,
    _validate_and_build,
    get_prediction_config,
    load_prediction_config,
    reload_prediction_config,
)


class TestConfigLoading:
    """Tests for loading the bundled prediction_config.yaml."""

    def test_load_default_config(self, prediction_config: PredictionConfig) -> None:
        assert prediction_config.version == "1.0"
        assert prediction_config.prediction.max_entries_analyzed == 90
        assert prediction_config.prediction.forecast_cycles == 3

    def test_confidence_bounds(self, prediction_config: PredictionConfig) -> None:
        bounds = prediction_config.prediction.confidence
        assert bounds.floor == 0.5
        assert bounds.cap == 0.95
        assert bounds.clamp(0.99) == 0.95
        assert bounds.clamp(0.1) == 0.5
        assert bounds.clamp(0.7) == 0.7

    def test_reminder_defaults(self, prediction_config: PredictionConfig) -> None:
        reminders = prediction_config.reminders
        assert reminders.default_days_before == 3
        assert reminders.default_frequency is ReminderFrequency.daily
        assert reminders.subject_for("medication") == "Cycle Tracker Reminder: medication"

    def test_singleton_is_cached(self) -> None:
        assert get_prediction_config() is get_prediction_config()

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_prediction_config(tmp_path / "missing.yaml")

    def test_malformed_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("prediction: [unclosed\n")
        with pytest.raises(ConfigValidationError, match="YAML parse error"):
            load_prediction_config(path)

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_prediction_config(path) == PredictionConfig()


class TestConfigValidation:
    """Invalid values are collected into a single ConfigValidationError."""

    def test_floor_above_cap(self) -> None:
        with pytest.raises(ConfigValidationError, match="exceeds"):
            _validate_and_build({"prediction": {"confidence": {"floor": 0.9, "cap": 0.6}}})

    def test_confidence_out_of_range(self) -> None:
        with pytest.raises(ConfigValidationError, match="out of range"):
            _validate_and_build({"prediction": {"confidence": {"cap": 1.5}}})

    def test_non_integer_window(self) -> None:
        with pytest.raises(ConfigValidationError, match="must be an integer"):
            _validate_and_build({"prediction": {"max_entries_analyzed": "lots"}})

    def test_zero_window_rejected(self) -> None:
        with pytest.raises(ConfigValidationError, match="must be >= 1"):
            _validate_and_build({"prediction": {"max_entries_analyzed": 0}})

    def test_zero_days_before_allowed(self) -> None:
        config = _validate_and_build({"reminders": {"default_days_before": 0}})
        assert config.reminders.default_days_before == 0

    def test_unknown_frequency(self) -> None:
        with pytest.raises(ConfigValidationError, match="default_frequency"):
            _validate_and_build({"reminders": {"default_frequency": "weekly"}})

    def test_bad_subject_template(self) -> None:
        with pytest.raises(ConfigValidationError, match="subject_template"):
            _validate_and_build({"reminders": {"subject_template": "Reminder {kind}"}})

    def test_all_errors_reported_together(self) -> None:
        with pytest.raises(ConfigValidationError, match="2 validation error"):
            _validate_and_build(
                {
                    "prediction": {"forecast_cycles": 0},
                    "reminders": {"default_frequency": "hourly"},
                }
            )


class TestConfigReload:
    def test_reload_replaces_singleton(self, tmp_path: Path) -> None:
        path = tmp_path / "prediction_config.yaml"
        path.write_text(
            textwrap.dedent(
                """\
                version: "2.0"
                prediction:
                  max_entries_analyzed: 60
                """
            )
        )
        try:
            reloaded = reload_prediction_config(path)
            assert reloaded.version == "2.0"
            assert get_prediction_config().prediction.max_entries_analyzed == 60
        finally:
            reload_prediction_config()

    def test_failed_reload_keeps_previous_config(self, tmp_path: Path) -> None:
        before = get_prediction_config()
        path = tmp_path / "bad.yaml"
        path.write_text("prediction:\n  forecast_cycles: 0\n")
        with pytest.raises(ConfigValidationError):
            reload_prediction_config(path)
        assert get_prediction_config() is before
