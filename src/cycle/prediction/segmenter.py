"""Cycle segmentation: find cycle-start dates in a flow log.

A cycle starts on the first flow day that follows a non-flow state.  Only an
explicitly logged non-flow entry (``none`` or no intensity) closes a period;
days with no entry at all are skipped and carry no signal, so a gap in
logging never splits or ends a bleeding run on its own.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from src.cycle.base import LogEntry

logger = logging.getLogger("cyclecast.prediction.segmenter")


def identify_cycle_starts(entries: Iterable[LogEntry]) -> list[date]:
    """Return the cycle-start dates found in ``entries``, oldest first.

    Entries are sorted ascending by date first, whatever order the caller
    supplied them in.

    Args:
        entries: Log entries for one person.

    Returns:
        Ordered list of cycle-start dates, possibly empty.
    """
    starts: list[date] = []
    in_period = False

    for entry in sorted(entries, key=lambda e: e.date):
        if entry.has_flow:
            if not in_period:
                starts.append(entry.date)
                in_period = True
        else:
            in_period = False

    logger.debug("Segmented log into %d cycle start(s)", len(starts))
    return starts
