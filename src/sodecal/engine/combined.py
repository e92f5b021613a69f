"""
Combined estimate for entries believed to record the same death.

The gestation-age ranges are intersected (max of mins, min of maxes). A
non-empty intersection is re-convolved against the same conception prior;
an empty one yields an all-zero calendar and status EMPTY_INTERSECTION.
Intersection commutes, so the result does not depend on input order.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

from sodecal.engine.convolver import convolve_death_dates, zero_calendar
from sodecal.engine.errors import CombineStatus
from sodecal.engine.ranges import GestationAgeRange

if TYPE_CHECKING:
    from sodecal.engine.session import Entry


@dataclass(frozen=True)
class CombineResult:
    """Outcome of combine_entries() / Session.combine()."""

    status: CombineStatus
    sources: tuple[int, ...]  # sorted 1-based entry indices
    age_range: GestationAgeRange  # invalid (min > max) on EMPTY_INTERSECTION
    calendar: np.ndarray = field(repr=False)
    entry: Optional["Entry"] = None  # set once appended to a session

    @property
    def ok(self) -> bool:
        return self.status is CombineStatus.OK

    def with_entry(self, entry: "Entry") -> "CombineResult":
        return replace(self, entry=entry)


def intersect_ranges(ranges: Sequence[GestationAgeRange]) -> GestationAgeRange:
    """Return [max of min_day, min of max_day] over `ranges`."""
    if len(ranges) == 0:
        raise ValueError("at least one range is required")
    return ranges[0].intersect(*ranges[1:])


def combine_entries(prior, entries: Sequence["Entry"]) -> CombineResult:
    """Fuse two or more distinct entries into one calendar.

    Args:
        prior: The conception prior used for the entries.
        entries: Entries with distinct indices.

    Returns:
        CombineResult without an appended entry.

    Raises:
        ValueError: If fewer than two distinct entries are given.
    """
    sources = tuple(sorted({e.index for e in entries}))
    if len(sources) < 2:
        raise ValueError("combining requires at least two distinct entries")

    combined = intersect_ranges([e.age_range for e in entries])
    if not combined.is_valid:
        return CombineResult(
            status=CombineStatus.EMPTY_INTERSECTION,
            sources=sources,
            age_range=combined,
            calendar=zero_calendar(),
        )

    return CombineResult(
        status=CombineStatus.OK,
        sources=sources,
        age_range=combined,
        calendar=convolve_death_dates(prior, combined),
    )
