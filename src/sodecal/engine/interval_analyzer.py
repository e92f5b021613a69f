"""
Interval analysis across K death-date calendars.

For an interval [s, e] (wrapping when s > e) the per-day arrays are

  prod(d) = prod_k D_k(d)      joint density of all deaths on day d
  min(d)  = min_k  D_k(d)      reporting envelope only
  max(d)  = max_k  D_k(d)      reporting envelope only

and are zero outside the interval. The scalar statistics are

  same_day_probability   = sum_d prod(d)
  all_within_probability = prod_k sum_d D_k(d)

K == 1 reports all_within only. The full year with K > 1 reports same_day
only. The full year with K == 1 is a degenerate query (both equal 1).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from sodecal.engine.cycle_mapper import YEAR_LENGTH
from sodecal.engine.errors import IntervalStatus
from sodecal.engine.ranges import Interval
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class IntervalResult:
    """Outcome of analyze_interval()."""

    status: IntervalStatus
    interval: Interval
    n_calendars: int
    prod: np.ndarray = field(repr=False)
    min_probs: np.ndarray = field(repr=False)
    max_probs: np.ndarray = field(repr=False)
    masses: tuple[float, ...]  # per-calendar mass inside the interval
    same_day_probability: float
    all_within_probability: float

    @property
    def is_degenerate(self) -> bool:
        return self.status is IntervalStatus.DEGENERATE_QUERY

    @property
    def reports_same_day(self) -> bool:
        """same_day is meaningful only for K > 1."""
        return self.n_calendars > 1

    @property
    def reports_all_within(self) -> bool:
        """all_within is meaningful unless K > 1 over the full year."""
        if self.is_degenerate:
            return False
        return not (self.n_calendars > 1 and self.interval.is_full_year)


def _stack(calendars: Sequence[np.ndarray]) -> np.ndarray:
    if len(calendars) == 0:
        raise ValueError("at least one calendar is required")
    stacked = np.vstack([np.asarray(c, dtype=float) for c in calendars])
    if stacked.shape[1] != YEAR_LENGTH:
        raise ValueError(f"calendars must have length {YEAR_LENGTH}, got {stacked.shape[1]}")
    return stacked


def analyze_interval(calendars: Sequence[np.ndarray], interval: Interval) -> IntervalResult:
    """Compute joint and per-calendar probabilities over `interval`.

    Args:
        calendars: K >= 1 arrays of shape (365,).
        interval: Day-of-year interval, possibly wrapping.

    Returns:
        IntervalResult; status DEGENERATE_QUERY for K == 1 over the full year.

    Raises:
        ValueError: If no calendars are given or shapes differ from (365,).
    """
    stacked = _stack(calendars)
    k = stacked.shape[0]

    idx = np.asarray(interval.days(), dtype=np.int64) - 1
    mask = np.zeros(YEAR_LENGTH, dtype=bool)
    mask[idx] = True

    prod = np.where(mask, np.prod(stacked, axis=0), 0.0)
    lo = np.where(mask, np.min(stacked, axis=0), 0.0)
    hi = np.where(mask, np.max(stacked, axis=0), 0.0)

    masses = tuple(float(m) for m in stacked[:, idx].sum(axis=1))
    same_day = float(prod.sum())
    all_within = float(np.prod(masses))

    status = IntervalStatus.OK
    if k == 1 and interval.is_full_year:
        status = IntervalStatus.DEGENERATE_QUERY

    logger.debug(
        f"interval {interval.start_day}-{interval.end_day} K={k}: "
        f"same_day={same_day:.6g} all_within={all_within:.6g} status={status.value}"
    )

    for arr in (prod, lo, hi):
        arr.flags.writeable = False

    return IntervalResult(
        status=status,
        interval=interval,
        n_calendars=k,
        prod=prod,
        min_probs=lo,
        max_probs=hi,
        masses=masses,
        same_day_probability=same_day,
        all_within_probability=all_within,
    )
