"""pandas tables for entries, their segments and their calendars."""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

from sodecal.engine.cycle_mapper import YEAR_DATE, YEAR_LENGTH, YEAR_MONTH, doy_label
from sodecal.engine.session import Entry

ENTRY_COLUMNS = [
    "entry",
    "label",
    "provenance",
    "element",
    "depth_mm",
    "min_day",
    "max_day",
    "segments",
]

SEGMENT_COLUMNS = ["entry", "low_day", "high_day", "from", "to", "days", "mass"]


def entries_table(entries: Sequence[Entry]) -> pd.DataFrame:
    """One row per entry."""
    rows = []
    for e in entries:
        rows.append(
            {
                "entry": e.index,
                "label": e.label,
                "provenance": e.provenance.label,
                "element": e.specimen.element if e.specimen else None,
                "depth_mm": e.specimen.depth_mm if e.specimen else np.nan,
                "min_day": e.age_range.min_day,
                "max_day": e.age_range.max_day,
                "segments": len(e.segments()),
            }
        )
    return pd.DataFrame(rows, columns=ENTRY_COLUMNS)


def segments_table(entries: Sequence[Entry]) -> pd.DataFrame:
    """One row per segment of each entry's calendar."""
    rows = []
    for e in entries:
        for seg in e.segments():
            rows.append(
                {
                    "entry": e.index,
                    "low_day": seg.low_day,
                    "high_day": seg.high_day,
                    "from": doy_label(seg.low_day),
                    "to": doy_label(seg.high_day),
                    "days": seg.length,
                    "mass": seg.mass,
                }
            )
    return pd.DataFrame(rows, columns=SEGMENT_COLUMNS)


def calendar_table(entries: Sequence[Entry]) -> pd.DataFrame:
    """Day-of-year rows with one probability column per entry (`entry_<i>`)."""
    df = pd.DataFrame(
        {
            "day": np.arange(1, YEAR_LENGTH + 1),
            "month": YEAR_MONTH,
            "date": YEAR_DATE,
        }
    )
    for e in entries:
        df[f"entry_{e.index}"] = e.calendar
    return df
