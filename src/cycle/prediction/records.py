"""Conversion between PredictionResult and prediction store rows.

Rows are append-only history.  Fertility dates are folded into the metadata
JSON next to the evidence summary::

    {
        "computed_on": "2026-03-01",
        "next_period_start": "2026-03-29",
        "next_period_end": "2026-04-02",
        "confidence": 0.95,
        "source": "historical",
        "metadata": {
            "cycles_analyzed": 3,
            "average_cycle_length": 28.0,
            "std_deviation": 0.0,
            "fertility_window_start": "2026-03-10",
            "fertility_window_end": "2026-03-16"
        }
    }
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Mapping

from src.cycle.base import PredictionMetadata, PredictionResult, PredictionSource


def _as_date(value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def to_record(result: PredictionResult, computed_on: date) -> dict[str, Any]:
    """Flatten ``result`` into the prediction store row shape."""
    metadata = result.metadata.to_dict()
    if result.fertility_window_start is not None:
        metadata["fertility_window_start"] = result.fertility_window_start.isoformat()
    if result.fertility_window_end is not None:
        metadata["fertility_window_end"] = result.fertility_window_end.isoformat()

    return {
        "computed_on": computed_on,
        "next_period_start": result.next_period_start,
        "next_period_end": result.next_period_end,
        "confidence": result.confidence,
        "source": result.source.value,
        "metadata": metadata,
    }


def from_record(row: Mapping[str, Any]) -> PredictionResult:
    """Rebuild a PredictionResult from a stored row.

    ``metadata`` may arrive as a JSON string (asyncpg's default for jsonb) or
    an already-decoded mapping.

    Raises:
        ValueError: If the source tag or a date is not recognised.
    """
    metadata_raw = row.get("metadata") or {}
    if isinstance(metadata_raw, str):
        metadata_raw = json.loads(metadata_raw)

    average = metadata_raw.get("average_cycle_length")
    std = metadata_raw.get("std_deviation")
    metadata = PredictionMetadata(
        cycles_analyzed=int(metadata_raw.get("cycles_analyzed", 0)),
        average_cycle_length=float(average) if average is not None else None,
        std_deviation=float(std) if std is not None else None,
    )

    return PredictionResult(
        next_period_start=_as_date(row["next_period_start"]),
        next_period_end=_as_date(row["next_period_end"]),
        fertility_window_start=_as_date(metadata_raw.get("fertility_window_start")),
        fertility_window_end=_as_date(metadata_raw.get("fertility_window_end")),
        confidence=float(row["confidence"]),
        source=PredictionSource(row["source"]),
        metadata=metadata,
    )
