"""
Segment extraction on a circular 365-day calendar.

A segment is a maximal run of strictly positive days. The ring is rotated to
start on an exact-zero day so one linear scan (OutsideRun / InsideRun) finds
every run, including one that passes through Dec 31 -> Jan 1. A calendar
without any zero is a single full-ring segment.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from sodecal.engine.cycle_mapper import YEAR_LENGTH


@dataclass(frozen=True)
class Segment:
    """Contiguous run of positive probability, days 1-based and inclusive.

    high_day < low_day means the run wraps through day 365 -> day 1.
    """

    low_day: int
    high_day: int
    mass: float

    @property
    def wraps(self) -> bool:
        return self.high_day < self.low_day

    @property
    def length(self) -> int:
        if self.wraps:
            return YEAR_LENGTH - self.low_day + 1 + self.high_day
        return self.high_day - self.low_day + 1

    def days(self) -> list[int]:
        if self.wraps:
            return list(range(self.low_day, YEAR_LENGTH + 1)) + list(range(1, self.high_day + 1))
        return list(range(self.low_day, self.high_day + 1))


class _ScanState(Enum):
    OUTSIDE_RUN = 0
    INSIDE_RUN = 1


def find_segments(calendar: np.ndarray) -> list[Segment]:
    """Return the segments of `calendar`, sorted by low_day.

    Args:
        calendar: Array of shape (365,), nonnegative.

    Returns:
        Pairwise disjoint segments whose union is the nonzero support. A
        wrapping segment, if any, is last. Empty for an all-zero calendar.
    """
    calendar = np.asarray(calendar, dtype=float)
    if calendar.shape != (YEAR_LENGTH,):
        raise ValueError(f"calendar must have shape ({YEAR_LENGTH},), got {calendar.shape}")

    positive = calendar > 0
    zeros = np.flatnonzero(~positive)
    if zeros.size == 0:
        return [Segment(1, YEAR_LENGTH, float(calendar.sum()))]

    # rotate so index 0 is the first zero day
    offset = int(zeros[0])
    rotated = np.roll(positive, -offset)

    runs: list[tuple[int, int]] = []
    state = _ScanState.OUTSIDE_RUN
    run_start = 0
    for i, is_positive in enumerate(rotated):
        if state is _ScanState.OUTSIDE_RUN and is_positive:
            state = _ScanState.INSIDE_RUN
            run_start = i
        elif state is _ScanState.INSIDE_RUN and not is_positive:
            state = _ScanState.OUTSIDE_RUN
            runs.append((run_start, i - 1))
    if state is _ScanState.INSIDE_RUN:
        runs.append((run_start, YEAR_LENGTH - 1))

    segments: list[Segment] = []
    for start, end in runs:
        low = (start + offset) % YEAR_LENGTH + 1
        high = (end + offset) % YEAR_LENGTH + 1
        idx = (np.arange(start, end + 1) + offset) % YEAR_LENGTH
        segments.append(Segment(low, high, float(calendar[idx].sum())))

    segments.sort(key=lambda s: (s.wraps, s.low_day))
    return segments
