"""Cycle-length samples and their summary statistics."""

from __future__ import annotations

import math
import statistics
from dataclasses import dataclass, field
from datetime import date


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with halves going up (28.5 -> 29), unlike Python's ``round``."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


@dataclass(frozen=True)
class LengthStatistics:
    """Cycle-length samples with their mean and sample standard deviation.

    Attributes:
        lengths: Day differences between consecutive cycle starts.
        mean:    Arithmetic mean of ``lengths`` (0.0 when there are none).
        std_dev: Sample standard deviation (n-1); 0.0 with fewer than 2 samples.
    """

    lengths: list[int] = field(default_factory=list)
    mean: float = 0.0
    std_dev: float = 0.0

    @property
    def sample_count(self) -> int:
        return len(self.lengths)

    @property
    def relative_deviation(self) -> float:
        """``std_dev / mean``, or 0.0 when the mean is degenerate."""
        if self.mean == 0:
            return 0.0
        return self.std_dev / self.mean


def cycle_lengths(starts: list[date]) -> list[int]:
    """Whole-day differences between consecutive cycle starts."""
    return [(starts[i] - starts[i - 1]).days for i in range(1, len(starts))]


def compute_length_statistics(starts: list[date]) -> LengthStatistics:
    """Summarize the cycle lengths implied by ``starts``.

    Args:
        starts: Cycle-start dates, oldest first.

    Returns:
        LengthStatistics; empty when fewer than two starts are given.
    """
    lengths = cycle_lengths(starts)
    if not lengths:
        return LengthStatistics()

    mean = statistics.mean(lengths)
    std_dev = statistics.stdev(lengths) if len(lengths) > 1 else 0.0
    return LengthStatistics(lengths=lengths, mean=float(mean), std_dev=float(std_dev))
