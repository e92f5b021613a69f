"""Tests for the conception calendar catalog."""

from __future__ import annotations

import numpy as np
import pytest

from sodecal.engine.convolver import PRIOR_LENGTH
from sodecal.resolvers import conception_priors as cp


def test_catalog_has_fourteen_calendars() -> None:
    catalog = cp.calendar_catalog()
    assert len(catalog) == 14
    assert [c.index for c in catalog] == list(range(1, 15))
    assert [c.smoothed for c in catalog] == [False, True] * 7
    assert catalog[0].key == "aggregate"
    assert catalog[1].key == "aggregate_smooth"
    assert catalog[12].key == "nbr"


@pytest.mark.parametrize("index", range(1, 15))
def test_every_calendar_is_a_distribution(index: int) -> None:
    values = cp.conception_prior(index)
    assert values.shape == (PRIOR_LENGTH,)
    assert np.all(values >= 0)
    assert values.sum() == pytest.approx(1.0)
    assert not values.flags.writeable


def test_smoothed_calendars_have_zero_tails() -> None:
    """Days without a full 21-day window are zero."""
    for cal in cp.calendar_catalog():
        if cal.smoothed:
            assert np.all(cal.values[:10] == 0.0)
            assert np.all(cal.values[-10:] == 0.0)


@pytest.mark.parametrize("index", [0, 15, -1])
def test_unknown_calendar_index(index: int) -> None:
    with pytest.raises(ValueError):
        cp.get_calendar(index)


def test_labels_and_citations() -> None:
    cal = cp.get_calendar(13)
    assert cal.label == "[13] National Bison Range copulations (n = 37) [sample data]"
    assert "Lott" in cal.citations[0]
    assert "3 week smooth" in cp.get_calendar(2).label
    assert cp.get_calendar(1).to_dict()["sample_size"] == 428


# --- herd tables ---


def test_nbr_counts_total_sample_size() -> None:
    assert sum(cp.NBR_COPULATIONS.values()) == 37
    assert sum(cp.HAUGEN_CONCEPTIONS.values()) == 131


def test_nbr_raw_support_matches_table() -> None:
    values = cp.get_calendar(13).values
    support = set(int(i) + 1 for i in np.flatnonzero(values))
    assert support == set(cp.NBR_COPULATIONS)


def test_haugen_bins_are_spread_evenly() -> None:
    values = cp.raw_series()["assorted"]
    # the 61..65 bin holds 32 of 131 conceptions
    np.testing.assert_allclose(values[60:65], 32 / 5 / 131)
    assert values[115] == 0.0  # 116..120 has no bin


def test_ynp_north_total_and_1941_shift() -> None:
    north = cp.ynp_herd_vector(cp.YNP_NORTH_BIRTHS, north=True)
    assert north.sum() == pytest.approx(192.0)
    # week 1 for 1989 covers days 27..33; 1941 week 1 starts a week later
    np.testing.assert_allclose(north[26:33], 1 / 7)
    np.testing.assert_allclose(north[33:40], 1 / 7 + 3 / 7)


def test_aggregate_weights_assorted_twice() -> None:
    series = cp.raw_series()
    expected = (2 * series["assorted"] + series["ynp_north"] + series["ynp_west"]) / 4
    np.testing.assert_allclose(series["aggregate"], expected)


# --- smoothing ---


def test_gaussian_weights() -> None:
    w = cp.gaussian_weights()
    assert len(w) == 21
    assert w.sum() == pytest.approx(1.0)
    np.testing.assert_allclose(w, w[::-1])
    assert w.argmax() == 10


def test_gaussian_smooth_of_single_day_is_the_kernel() -> None:
    x = np.zeros(PRIOR_LENGTH)
    x[100] = 1.0
    smoothed = cp.gaussian_smooth(x)
    np.testing.assert_allclose(smoothed[90:111], cp.gaussian_weights())
    assert smoothed.sum() == pytest.approx(1.0)


def test_binned_counts_length_mismatch() -> None:
    with pytest.raises(ValueError):
        cp.binned_counts([1, 8], [1], 7)


def test_calendar_frame_columns() -> None:
    df = cp.calendar_frame()
    assert len(df) == PRIOR_LENGTH
    assert df.loc[0, "month"] == "Jun" and df.loc[0, "date"] == 1
    assert df.loc[244, "month"] == "Jan" and df.loc[244, "date"] == 31
    assert "niobrara_smooth" in df.columns
