"""
Death-date convolution: conception prior x uniform gestation age -> SODE.

Algorithm
---------
For every gestation age y in [min_day, max_day] the conception prior is
added into a cycle-length accumulator starting at cycle position y
(1-based), i.e. acc[y - 1 + i] += prior[i]. The accumulator is folded onto
the 365-day ring and normalized. Days that receive no contribution stay
exactly 0.0, which segmentation relies on.
"""

from __future__ import annotations

import numpy as np

from sodecal.engine.cycle_mapper import CYCLE_LENGTH, YEAR_LENGTH, fold
from sodecal.engine.errors import InvalidRange, NormalizationFailure
from sodecal.engine.ranges import GestationAgeRange
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)

PRIOR_LENGTH = 245  # June 1 .. January 31

# Totals at or below this are treated as zero mass.
MASS_EPSILON = 1e-300


def as_conception_prior(values) -> np.ndarray:
    """Validate and freeze a conception prior.

    Args:
        values: Sequence of PRIOR_LENGTH finite nonnegative reals, indexed by
            offset day from June 1. It is not renormalized here.

    Returns:
        Read-only float copy.

    Raises:
        ValueError: On wrong shape, non-finite or negative values.
    """
    prior = np.array(values, dtype=float)
    if prior.shape != (PRIOR_LENGTH,):
        raise ValueError(f"conception prior must have shape ({PRIOR_LENGTH},), got {prior.shape}")
    if not np.all(np.isfinite(prior)):
        raise ValueError("conception prior contains non-finite values")
    if np.any(prior < 0):
        raise ValueError("conception prior contains negative values")
    prior.flags.writeable = False
    return prior


def max_gestation_day(prior_length: int = PRIOR_LENGTH) -> int:
    """Largest gestation age whose shifted prior still fits in the cycle."""
    return CYCLE_LENGTH - prior_length + 1


def accumulate(prior: np.ndarray, age_range: GestationAgeRange) -> np.ndarray:
    """Return the unnormalized cycle-length accumulator for `age_range`.

    Raises:
        InvalidRange: If the range is inverted, starts below day 1, or
            shifts the prior past the end of the cycle.
    """
    prior = np.asarray(prior, dtype=float)
    bound = max_gestation_day(len(prior))
    if not age_range.is_valid:
        raise InvalidRange(f"invalid gestation age range {age_range.min_day} - {age_range.max_day}")
    if age_range.max_day > bound:
        raise InvalidRange(f"gestation age {age_range.max_day} exceeds the cycle bound {bound}")

    acc = np.zeros(CYCLE_LENGTH, dtype=float)
    n = len(prior)
    for y in range(age_range.min_day, age_range.max_day + 1):
        acc[y - 1 : y - 1 + n] += prior
    return acc


def convolve_death_dates(prior, age_range: GestationAgeRange) -> np.ndarray:
    """Build the normalized 365-day death-date calendar for one range.

    Args:
        prior: Conception prior (PRIOR_LENGTH values).
        age_range: Gestation-age range, 1 <= min_day <= max_day <= 335.

    Returns:
        Read-only array of shape (365,) summing to 1.

    Raises:
        ValueError: If the prior is malformed.
        InvalidRange: If the range is invalid.
        NormalizationFailure: If the folded total is zero (e.g. all-zero prior).
    """
    prior = as_conception_prior(prior)
    folded = fold(accumulate(prior, age_range))

    total = float(folded.sum())
    if not np.isfinite(total) or total <= MASS_EPSILON:
        raise NormalizationFailure(
            f"folded calendar for range {age_range} has total mass {total!r}"
        )
    calendar = folded / total
    calendar.flags.writeable = False

    logger.debug(
        f"convolved range {age_range}: support={int(np.count_nonzero(calendar))} days"
    )
    return calendar


def zero_calendar() -> np.ndarray:
    """Read-only all-zero calendar (used for empty intersections)."""
    calendar = np.zeros(YEAR_LENGTH, dtype=float)
    calendar.flags.writeable = False
    return calendar
