"""Tests for the extended-cycle -> day-of-year mapping."""

from __future__ import annotations

import numpy as np
import pytest

from sodecal.engine import cycle_mapper as cm


def test_cycle_length_and_doy_range() -> None:
    """Cycle table has 579 positions mapping into 1..365."""
    assert cm.CYCLE_DOY.shape == (cm.CYCLE_LENGTH,)
    assert cm.CYCLE_DOY.min() == 1
    assert cm.CYCLE_DOY.max() == cm.YEAR_LENGTH


def test_cycle_segments_map_as_documented() -> None:
    """1..214 -> 152..365, 215..365 -> 1..151, 366..579 -> 152..365."""
    np.testing.assert_array_equal(cm.CYCLE_DOY[0:214], np.arange(152, 366))
    np.testing.assert_array_equal(cm.CYCLE_DOY[214:365], np.arange(1, 152))
    np.testing.assert_array_equal(cm.CYCLE_DOY[365:579], np.arange(152, 366))


def test_duplicated_days_have_two_positions() -> None:
    """Jun..Dec days occur twice in the cycle, Jan..May once."""
    assert cm.cycle_positions_for_day(152) == [1, 366]
    assert cm.cycle_positions_for_day(365) == [214, 579]
    assert cm.cycle_positions_for_day(1) == [215]
    assert cm.cycle_positions_for_day(151) == [365]


def test_fold_sums_both_contributions() -> None:
    """fold() adds both cycle positions for duplicated days."""
    extended = np.zeros(cm.CYCLE_LENGTH)
    extended[0] = 0.25  # Jun 1, year 1
    extended[365] = 0.5  # Jun 1, year 2
    extended[214] = 0.25  # Jan 1
    folded = cm.fold(extended)
    assert folded.shape == (365,)
    assert folded[151] == 0.75
    assert folded[0] == 0.25
    assert np.count_nonzero(folded) == 2


def test_fold_rejects_wrong_length() -> None:
    """fold() requires a cycle-length array."""
    with pytest.raises(ValueError) as exc_info:
        cm.fold(np.zeros(365))
    assert "579" in str(exc_info.value)


def test_doy_labels() -> None:
    """Year labels start on Jan 1 and end on Dec 31 with a 28-day February."""
    assert cm.doy_label(1) == "Jan 1"
    assert cm.doy_label(59) == "Feb 28"
    assert cm.doy_label(60) == "Mar 1"
    assert cm.doy_label(152) == "Jun 1"
    assert cm.doy_label(365) == "Dec 31"
    labels = cm.doy_labels()
    assert len(labels) == 365
    assert labels[0] == "Jan 1"


def test_doy_label_out_of_range() -> None:
    """Days outside 1..365 are rejected."""
    with pytest.raises(ValueError):
        cm.doy_label(0)
    with pytest.raises(ValueError):
        cm.doy_label(366)


def test_month_bands_cover_year() -> None:
    """Month bands are contiguous and cover 1..365."""
    bands = cm.month_bands()
    assert [b[0] for b in bands][:2] == ["Jan", "Feb"]
    assert bands[0][1] == 1
    assert bands[-1] == ("Dec", 335, 365)
    for (_, _, end), (_, start, _) in zip(bands, bands[1:]):
        assert start == end + 1


def test_tables_are_read_only() -> None:
    """Static tables cannot be mutated."""
    with pytest.raises(ValueError):
        cm.CYCLE_DOY[0] = 1
