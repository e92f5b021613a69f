"""Circular probability-calendar engine (pure numpy)."""

from sodecal.engine.combined import CombineResult, combine_entries, intersect_ranges
from sodecal.engine.convolver import (
    PRIOR_LENGTH,
    as_conception_prior,
    convolve_death_dates,
    max_gestation_day,
)
from sodecal.engine.cycle_mapper import CYCLE_LENGTH, YEAR_LENGTH, doy_label, fold
from sodecal.engine.errors import (
    CombineStatus,
    IntervalStatus,
    InvalidRange,
    NormalizationFailure,
    SodeError,
)
from sodecal.engine.interval_analyzer import IntervalResult, analyze_interval
from sodecal.engine.ranges import GestationAgeRange, Interval
from sodecal.engine.segments import Segment, find_segments
from sodecal.engine.session import Entry, EntryKind, Provenance, Session, SpecimenInfo

__all__ = [
    "CYCLE_LENGTH",
    "PRIOR_LENGTH",
    "YEAR_LENGTH",
    "CombineResult",
    "CombineStatus",
    "Entry",
    "EntryKind",
    "GestationAgeRange",
    "Interval",
    "IntervalResult",
    "IntervalStatus",
    "InvalidRange",
    "NormalizationFailure",
    "Provenance",
    "Segment",
    "Session",
    "SodeError",
    "SpecimenInfo",
    "analyze_interval",
    "as_conception_prior",
    "combine_entries",
    "convolve_death_dates",
    "doy_label",
    "find_segments",
    "fold",
    "intersect_ranges",
    "max_gestation_day",
]
