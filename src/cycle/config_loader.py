"""Load, validate, and hot-reload the CycleCast prediction configuration.

The config lives in ``prediction_config.yaml`` alongside this module.  At
startup it is loaded once and cached.  Call ``reload_prediction_config()`` to
re-read from disk after an admin update without a restart.

Usage::

    from src.cycle.config_loader import get_prediction_config

    config = get_prediction_config()
    config.prediction.max_entries_analyzed   # 90
    config.reminders.default_days_before     # 3
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from src.cycle.base import ReminderFrequency

logger = logging.getLogger("cyclecast.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "prediction_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConfidenceBounds:
    """Clamp applied to every confidence score."""

    floor: float = 0.5
    cap: float = 0.95

    def clamp(self, value: float) -> float:
        return max(self.floor, min(self.cap, value))


@dataclass(frozen=True)
class PredictionSettings:
    """Prediction engine settings."""

    max_entries_analyzed: int = 90
    forecast_cycles: int = 3
    confidence: ConfidenceBounds = field(default_factory=ConfidenceBounds)


@dataclass(frozen=True)
class ReminderSettings:
    """Reminder evaluation and message settings."""

    default_days_before: int = 3
    default_frequency: ReminderFrequency = ReminderFrequency.daily
    subject_template: str = "Cycle Tracker Reminder: {reminder_type}"

    def subject_for(self, reminder_type: str) -> str:
        return self.subject_template.format(reminder_type=reminder_type)


@dataclass(frozen=True)
class PredictionConfig:
    """Complete, validated prediction configuration.

    This is the single in-memory representation of prediction_config.yaml.
    The engine, reminder evaluator and dispatcher all read from this object.
    """

    version: str = "1.0"
    prediction: PredictionSettings = field(default_factory=PredictionSettings)
    reminders: ReminderSettings = field(default_factory=ReminderSettings)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when prediction_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Prediction config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> PredictionConfig:
    """Validate the raw YAML dict and construct a PredictionConfig.

    Every problem is collected so a single error lists all of them.

    Raises:
        ConfigValidationError: If any field is invalid.
    """
    errors: list[str] = []

    def _int(section: dict, key: str, default: int, path: str, minimum: int) -> int:
        value = section.get(key, default)
        try:
            number = int(value)
        except (TypeError, ValueError):
            errors.append(f"{path}.{key} must be an integer, got {value!r}")
            return default
        if number < minimum:
            errors.append(f"{path}.{key} = {number} must be >= {minimum}")
        return number

    def _float(section: dict, key: str, default: float, path: str) -> float:
        value = section.get(key, default)
        try:
            number = float(value)
        except (TypeError, ValueError):
            errors.append(f"{path}.{key} must be a number, got {value!r}")
            return default
        if not 0.0 <= number <= 1.0:
            errors.append(f"{path}.{key} = {number} is out of range [0.0, 1.0]")
        return number

    version = str(raw.get("version", "1.0"))

    # ── Prediction ──
    pr_raw = raw.get("prediction") or {}
    conf_raw = pr_raw.get("confidence") or {}
    confidence = ConfidenceBounds(
        floor=_float(conf_raw, "floor", 0.5, "prediction.confidence"),
        cap=_float(conf_raw, "cap", 0.95, "prediction.confidence"),
    )
    if confidence.floor > confidence.cap:
        errors.append(
            f"prediction.confidence.floor ({confidence.floor}) exceeds "
            f"cap ({confidence.cap})"
        )
    prediction = PredictionSettings(
        max_entries_analyzed=_int(pr_raw, "max_entries_analyzed", 90, "prediction", 1),
        forecast_cycles=_int(pr_raw, "forecast_cycles", 3, "prediction", 1),
        confidence=confidence,
    )

    # ── Reminders ──
    rm_raw = raw.get("reminders") or {}
    frequency_raw = rm_raw.get("default_frequency", ReminderFrequency.daily.value)
    try:
        default_frequency = ReminderFrequency(frequency_raw)
    except ValueError:
        errors.append(
            f"reminders.default_frequency must be one of "
            f"{[f.value for f in ReminderFrequency]}, got {frequency_raw!r}"
        )
        default_frequency = ReminderFrequency.daily

    subject_template = str(
        rm_raw.get("subject_template", "Cycle Tracker Reminder: {reminder_type}")
    )
    try:
        subject_template.format(reminder_type="period_start")
    except (KeyError, IndexError, ValueError) as exc:
        errors.append(f"reminders.subject_template is not a valid template: {exc}")

    reminders = ReminderSettings(
        default_days_before=_int(rm_raw, "default_days_before", 3, "reminders", 0),
        default_frequency=default_frequency,
        subject_template=subject_template,
    )

    if errors:
        raise ConfigValidationError(
            f"prediction_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return PredictionConfig(version=version, prediction=prediction, reminders=reminders)


def load_prediction_config(path: Path | None = None) -> PredictionConfig:
    """Load and validate the prediction config from disk.

    Args:
        path: Override path to YAML. Uses the bundled prediction_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded prediction config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: PredictionConfig | None = None
_config_lock = threading.Lock()


def get_prediction_config() -> PredictionConfig:
    """Return the global PredictionConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_prediction_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_prediction_config()
    return _config


def reload_prediction_config(path: Path | None = None) -> PredictionConfig:
    """Reload the prediction config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_prediction_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded prediction config: %s → %s", old_version, new_config.version)
    return new_config
