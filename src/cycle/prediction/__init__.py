"""Cycle prediction: segmentation, statistics, confidence and projection.

Modules:
    segmenter    : Cycle-start detection from a flow log
    length_stats : Cycle-length samples, mean and sample std deviation
    confidence   : Evidence tier and confidence score
    projector    : Next period and fertility window dates
    engine       : PredictionEngine composing the steps above
    records      : PredictionResult ↔ prediction store rows
"""

from src.cycle.prediction.engine import PredictedWindow, PredictionEngine
from src.cycle.prediction.records import from_record, to_record

__all__ = [
    "PredictionEngine",
    "PredictedWindow",
    "from_record",
    "to_record",
]
