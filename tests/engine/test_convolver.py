"""Tests for the death-date convolver."""

from __future__ import annotations

import numpy as np
import pytest

from sodecal.engine.convolver import (
    PRIOR_LENGTH,
    accumulate,
    as_conception_prior,
    convolve_death_dates,
    max_gestation_day,
)
from sodecal.engine.cycle_mapper import CYCLE_LENGTH, fold
from sodecal.engine.errors import InvalidRange, NormalizationFailure
from sodecal.engine.ranges import GestationAgeRange


# --- normalization ---


@pytest.mark.parametrize("lo,hi", [(1, 1), (1, 10), (120, 180), (200, 320), (335, 335)])
def test_calendar_sums_to_one(uniform_prior: np.ndarray, lo: int, hi: int) -> None:
    """Every valid range yields a 365-day calendar summing to 1."""
    cal = convolve_death_dates(uniform_prior, GestationAgeRange(lo, hi))
    assert cal.shape == (365,)
    assert abs(cal.sum() - 1.0) < 1e-9
    assert np.all(cal >= 0)


def test_calendar_is_read_only(uniform_prior: np.ndarray) -> None:
    """Returned calendars are immutable."""
    cal = convolve_death_dates(uniform_prior, GestationAgeRange(5, 6))
    with pytest.raises(ValueError):
        cal[0] = 1.0


# --- exactness ---


@pytest.mark.parametrize("day", [1, 57, 280, 335])
def test_single_day_range_is_exact_shift_and_fold(rut_prior: np.ndarray, day: int) -> None:
    """min == max reduces to the prior shifted by day-1 and folded."""
    shifted = np.zeros(CYCLE_LENGTH)
    shifted[day - 1 : day - 1 + PRIOR_LENGTH] = rut_prior
    expected = fold(shifted)
    expected = expected / expected.sum()

    cal = convolve_death_dates(rut_prior, GestationAgeRange(day, day))
    np.testing.assert_array_equal(cal, expected)


def test_exact_zeros_preserved(rut_prior: np.ndarray) -> None:
    """Days without contribution are exactly 0.0."""
    cal = convolve_death_dates(rut_prior, GestationAgeRange(100, 110))
    # rut offsets 61..80 shifted by 99..109 -> cycle indices 160..189
    nonzero = np.flatnonzero(cal)
    assert len(nonzero) == 30
    zero_days = np.setdiff1d(np.arange(365), nonzero)
    assert np.all(cal[zero_days] == 0.0)


# --- uniform prior scenario ---


def test_uniform_prior_plateau_and_ramps(uniform_prior: np.ndarray) -> None:
    """Uniform prior with range [1, 10]: 236-day plateau, 9-day ramps."""
    cal = convolve_death_dates(uniform_prior, GestationAgeRange(1, 10))
    assert abs(cal.sum() - 1.0) < 1e-9

    # unfold: cycle position 1 is Jun 1 = DOY 152 (index 151); support is 254 days
    unfolded = np.roll(cal, -151)
    support = unfolded[:254]
    assert np.all(support > 0)
    assert np.all(unfolded[254:] == 0.0)

    peak = support.max()
    plateau = np.isclose(support, peak, rtol=1e-12, atol=0.0)
    assert int(plateau.sum()) == 236
    assert np.all(plateau[9:245])

    rising = support[:10]
    falling = support[244:]
    assert np.all(np.diff(rising) > 0)
    assert np.all(np.diff(falling) < 0)
    assert len(support[:9]) == 9 and len(support[245:]) == 9


# --- bounds and errors ---


def test_max_gestation_day() -> None:
    """Bound is cycle length minus prior length plus one."""
    assert max_gestation_day() == 335
    assert max_gestation_day(100) == 480


@pytest.mark.parametrize("lo,hi", [(10, 9), (0, 5), (-3, 2), (300, 336)])
def test_invalid_ranges_raise(uniform_prior: np.ndarray, lo: int, hi: int) -> None:
    """Inverted, sub-1 and out-of-cycle ranges raise InvalidRange."""
    with pytest.raises(InvalidRange):
        convolve_death_dates(uniform_prior, GestationAgeRange(lo, hi))


def test_invalid_range_is_value_error(uniform_prior: np.ndarray) -> None:
    """InvalidRange is a ValueError for callers that only catch builtins."""
    with pytest.raises(ValueError):
        accumulate(uniform_prior, GestationAgeRange(5, 1))


def test_zero_prior_raises_normalization_failure() -> None:
    """An all-zero prior has nothing to normalize."""
    with pytest.raises(NormalizationFailure):
        convolve_death_dates(np.zeros(PRIOR_LENGTH), GestationAgeRange(1, 10))


def test_unnormalized_prior_is_normalized(uniform_prior: np.ndarray) -> None:
    """Scaling the prior does not change the calendar."""
    a = convolve_death_dates(uniform_prior, GestationAgeRange(40, 60))
    b = convolve_death_dates(uniform_prior * 7.0, GestationAgeRange(40, 60))
    np.testing.assert_allclose(a, b, rtol=1e-12)


# --- prior validation ---


def test_prior_wrong_length() -> None:
    with pytest.raises(ValueError) as exc_info:
        as_conception_prior(np.ones(244))
    assert "245" in str(exc_info.value)


def test_prior_negative_or_nan() -> None:
    bad = np.ones(PRIOR_LENGTH)
    bad[3] = -1.0
    with pytest.raises(ValueError):
        as_conception_prior(bad)
    bad[3] = np.nan
    with pytest.raises(ValueError):
        as_conception_prior(bad)


def test_prior_is_copied(uniform_prior: np.ndarray) -> None:
    """Mutating the source array does not change the frozen prior."""
    source = uniform_prior.copy()
    prior = as_conception_prior(source)
    source[0] = 99.0
    assert prior[0] == pytest.approx(1.0 / PRIOR_LENGTH)
    assert not prior.flags.writeable
