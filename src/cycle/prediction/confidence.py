"""Confidence model: how much to trust a forecast given its evidence.

| samples | source          | predicted length       | confidence                        |
|---------|-----------------|------------------------|-----------------------------------|
| 0       | profile_default | profile cycle length   | 0.5                               |
| 1–2     | hybrid          | mean, rounded          | 0.6 + 0.1 × samples               |
| ≥ 3     | historical      | mean, rounded          | 1 − (std / mean) × 0.5            |

Every score is clamped to the configured bounds (0.5–0.95 by default) and
rounded to two decimal places.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.cycle.base import PredictionSource, Profile
from src.cycle.config_loader import ConfidenceBounds
from src.cycle.prediction.length_stats import LengthStatistics, round_half_up

# Samples needed before history alone drives the forecast
HISTORICAL_MIN_SAMPLES = 3

_PROFILE_DEFAULT_CONFIDENCE = 0.5
_HYBRID_BASE = 0.6
_HYBRID_STEP = 0.1
_DEVIATION_WEIGHT = 0.5


@dataclass(frozen=True)
class ConfidenceAssessment:
    """Outcome of the confidence model for one prediction."""

    source: PredictionSource
    predicted_length: int
    confidence: float


def assess_confidence(
    stats: LengthStatistics,
    profile: Profile,
    bounds: ConfidenceBounds | None = None,
) -> ConfidenceAssessment:
    """Classify the evidence tier and score it.

    Args:
        stats:   Cycle-length statistics for the person.
        profile: Profile supplying the default cycle length.
        bounds:  Clamp for the score (defaults to 0.5–0.95).

    Returns:
        ConfidenceAssessment with source tag, cycle length to project and score.
    """
    bounds = bounds or ConfidenceBounds()
    samples = stats.sample_count

    if samples == 0:
        source = PredictionSource.profile_default
        predicted_length = profile.cycle_length_days
        raw = _PROFILE_DEFAULT_CONFIDENCE
    elif samples < HISTORICAL_MIN_SAMPLES:
        source = PredictionSource.hybrid
        predicted_length = int(round_half_up(stats.mean))
        raw = _HYBRID_BASE + _HYBRID_STEP * samples
    else:
        source = PredictionSource.historical
        predicted_length = int(round_half_up(stats.mean))
        raw = 1 - stats.relative_deviation * _DEVIATION_WEIGHT

    confidence = round_half_up(bounds.clamp(raw), 2)
    return ConfidenceAssessment(
        source=source,
        predicted_length=predicted_length,
        confidence=confidence,
    )
