"""Tests for interval analysis across several calendars."""

from __future__ import annotations

import numpy as np
import pytest

from sodecal.engine.convolver import convolve_death_dates
from sodecal.engine.errors import IntervalStatus
from sodecal.engine.interval_analyzer import analyze_interval
from sodecal.engine.ranges import GestationAgeRange, Interval


@pytest.fixture
def calendars(uniform_prior: np.ndarray) -> list[np.ndarray]:
    return [
        convolve_death_dates(uniform_prior, GestationAgeRange(100, 140)),
        convolve_death_dates(uniform_prior, GestationAgeRange(120, 180)),
    ]


# --- Interval ---


def test_interval_single_day_does_not_wrap() -> None:
    """start == end is one day, not the whole ring."""
    iv = Interval(40, 40)
    assert not iv.wraps
    assert iv.days() == [40]


def test_interval_wrapping_days_and_pieces() -> None:
    iv = Interval(364, 2)
    assert iv.wraps
    assert iv.days() == [364, 365, 1, 2]
    assert iv.pieces() == [(364, 365), (1, 2)]


@pytest.mark.parametrize("s,e", [(0, 10), (1, 366), (-1, 5)])
def test_interval_rejects_out_of_range(s: int, e: int) -> None:
    with pytest.raises(ValueError):
        Interval(s, e)


# --- single calendar ---


def test_single_calendar_full_year_is_degenerate(calendars: list[np.ndarray]) -> None:
    result = analyze_interval(calendars[:1], Interval.full_year())
    assert result.status is IntervalStatus.DEGENERATE_QUERY
    assert result.is_degenerate
    assert not result.reports_same_day
    assert not result.reports_all_within
    assert result.all_within_probability == pytest.approx(1.0)


def test_single_calendar_partial_interval(calendars: list[np.ndarray]) -> None:
    """K == 1 reports the mass inside the interval."""
    cal = calendars[0]
    result = analyze_interval([cal], Interval(1, 180))
    assert result.status is IntervalStatus.OK
    assert not result.reports_same_day
    assert result.reports_all_within
    assert result.all_within_probability == pytest.approx(cal[:180].sum())
    assert result.masses == pytest.approx((cal[:180].sum(),))


# --- several calendars ---


def test_two_calendars_full_year_reports_same_day_only(calendars: list[np.ndarray]) -> None:
    result = analyze_interval(calendars, Interval.full_year())
    assert result.status is IntervalStatus.OK
    assert result.reports_same_day
    assert not result.reports_all_within
    expected = float(np.sum(calendars[0] * calendars[1]))
    assert result.same_day_probability == pytest.approx(expected)
    assert result.all_within_probability == pytest.approx(1.0)


def test_arrays_are_zero_outside_interval(calendars: list[np.ndarray]) -> None:
    iv = Interval(300, 20)
    result = analyze_interval(calendars, iv)
    inside = np.zeros(365, dtype=bool)
    inside[np.asarray(iv.days()) - 1] = True
    for arr in (result.prod, result.min_probs, result.max_probs):
        assert np.all(arr[~inside] == 0.0)
    assert np.all(result.min_probs <= result.max_probs)
    np.testing.assert_allclose(
        result.prod[inside], (calendars[0] * calendars[1])[inside]
    )


def test_wrapping_interval_matches_sum_of_pieces(calendars: list[np.ndarray]) -> None:
    """A wrapping interval adds up its two non-wrapping pieces."""
    whole = analyze_interval(calendars, Interval(300, 60))
    tail = analyze_interval(calendars, Interval(300, 365))
    head = analyze_interval(calendars, Interval(1, 60))
    assert whole.same_day_probability == pytest.approx(
        tail.same_day_probability + head.same_day_probability
    )
    for k in range(2):
        assert whole.masses[k] == pytest.approx(tail.masses[k] + head.masses[k])


def test_all_within_is_product_of_masses(calendars: list[np.ndarray]) -> None:
    result = analyze_interval(calendars, Interval(200, 320))
    assert result.all_within_probability == pytest.approx(np.prod(result.masses))
    assert 0.0 <= result.same_day_probability <= 1.0


def test_identical_calendars_same_day_is_sum_of_squares(calendars: list[np.ndarray]) -> None:
    cal = calendars[0]
    result = analyze_interval([cal, cal], Interval.full_year())
    assert result.same_day_probability == pytest.approx(float(np.sum(cal**2)))


def test_result_arrays_are_read_only(calendars: list[np.ndarray]) -> None:
    result = analyze_interval(calendars, Interval(1, 100))
    with pytest.raises(ValueError):
        result.prod[0] = 1.0


def test_no_calendars_rejected() -> None:
    with pytest.raises(ValueError):
        analyze_interval([], Interval.full_year())


def test_wrong_calendar_length_rejected() -> None:
    with pytest.raises(ValueError):
        analyze_interval([np.zeros(300)], Interval.full_year())
