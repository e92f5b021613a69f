"""Session context: the conception prior plus an append-only list of entries.

Entries are 1-indexed, never mutated and never removed. Measured entries come
from the resolver boundary; combined entries are produced by
`Session.combine()` and can be combined again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence

import numpy as np

from sodecal.engine.combined import CombineResult, combine_entries
from sodecal.engine.convolver import as_conception_prior, convolve_death_dates
from sodecal.engine.errors import CombineStatus
from sodecal.engine.interval_analyzer import IntervalResult, analyze_interval
from sodecal.engine.ranges import GestationAgeRange, Interval
from sodecal.engine.segments import Segment, find_segments
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)


class EntryKind(str, Enum):
    MEASURED = "measured"
    COMBINED = "combined"


@dataclass(frozen=True)
class Provenance:
    """Where an entry came from."""

    kind: EntryKind
    sources: tuple[int, ...] = ()  # 1-based entry indices (combined only)

    @property
    def label(self) -> str:
        if self.kind is EntryKind.MEASURED:
            return "measured"
        return "combined [entries " + ", ".join(str(i) for i in self.sources) + "]"


@dataclass(frozen=True)
class SpecimenInfo:
    """Measurement that produced a measured entry."""

    element: str
    depth_mm: float
    length_min_mm: Optional[float] = None
    length_max_mm: Optional[float] = None


@dataclass(frozen=True)
class Entry:
    """Gestation-age range plus its death-date calendar."""

    index: int  # 1-based position in the session
    age_range: GestationAgeRange
    calendar: np.ndarray = field(repr=False)
    provenance: Provenance
    label: str = ""
    specimen: Optional[SpecimenInfo] = None

    def segments(self) -> list[Segment]:
        return find_segments(self.calendar)


class Session:
    """Owns the conception prior and the entry collection for one analysis.

    Not shared between threads; create one Session per user/analysis.
    """

    def __init__(self, prior, *, prior_name: str = "") -> None:
        self._prior = as_conception_prior(prior)
        self.prior_name = prior_name
        self._entries: list[Entry] = []

    @property
    def prior(self) -> np.ndarray:
        return self._prior

    @property
    def entries(self) -> tuple[Entry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def entry(self, index: int) -> Entry:
        """Return the entry at 1-based `index`.

        Raises:
            IndexError: If index is outside 1..len(session).
        """
        if not 1 <= int(index) <= len(self._entries):
            raise IndexError(f"entry index must be in 1..{len(self._entries)}, got {index}")
        return self._entries[int(index) - 1]

    def add_measured(
        self,
        age_range: GestationAgeRange,
        *,
        specimen: Optional[SpecimenInfo] = None,
        label: Optional[str] = None,
    ) -> Entry:
        """Convolve `age_range` against the prior and append a measured entry.

        Raises:
            InvalidRange, NormalizationFailure: From the convolver; nothing is appended.
        """
        calendar = convolve_death_dates(self._prior, age_range)
        if label is None:
            label = specimen.element if specimen is not None else f"range {age_range}"
        return self._append(age_range, calendar, Provenance(EntryKind.MEASURED), label, specimen)

    def add_measured_many(
        self, items: Sequence[tuple[GestationAgeRange, Optional[SpecimenInfo]]]
    ) -> list[Entry]:
        """Convolve every (age_range, specimen) pair, then append them all.

        Raises:
            InvalidRange, NormalizationFailure: From the convolver; nothing is appended.
        """
        calendars = [convolve_death_dates(self._prior, age_range) for age_range, _ in items]
        added = []
        for (age_range, specimen), calendar in zip(items, calendars):
            label = specimen.element if specimen is not None else f"range {age_range}"
            added.append(
                self._append(age_range, calendar, Provenance(EntryKind.MEASURED), label, specimen)
            )
        return added

    def _append(
        self,
        age_range: GestationAgeRange,
        calendar: np.ndarray,
        provenance: Provenance,
        label: str,
        specimen: Optional[SpecimenInfo] = None,
    ) -> Entry:
        entry = Entry(
            index=len(self._entries) + 1,
            age_range=age_range,
            calendar=calendar,
            provenance=provenance,
            label=label,
            specimen=specimen,
        )
        self._entries.append(entry)
        logger.info(f"added entry {entry.index} ({provenance.label}) range {age_range}")
        return entry

    def resolve_indices(self, indices: Iterable[int]) -> list[int]:
        """Validate 1-based indices; keeps order, drops duplicates."""
        out: list[int] = []
        for raw in indices:
            i = int(raw)
            if not 1 <= i <= len(self._entries):
                raise IndexError(f"entry index must be in 1..{len(self._entries)}, got {raw}")
            if i not in out:
                out.append(i)
        return out

    def analyze_interval(self, indices: Sequence[int], interval: Interval) -> IntervalResult:
        """Run the interval analysis over the selected entries (duplicates kept)."""
        if len(indices) == 0:
            raise ValueError("select at least one entry")
        for i in indices:
            self.entry(i)
        return analyze_interval([self.entry(i).calendar for i in indices], interval)

    def combine(self, indices: Sequence[int]) -> CombineResult:
        """Intersect the selected entries' ranges; append the fused entry on success.

        Raises:
            ValueError: If fewer than two distinct entries are selected.
            IndexError: If an index is out of range.
        """
        unique = self.resolve_indices(indices)
        result = combine_entries(self._prior, [self.entry(i) for i in unique])
        if result.status is CombineStatus.OK:
            entry = self._append(
                result.age_range,
                result.calendar,
                Provenance(EntryKind.COMBINED, result.sources),
                Provenance(EntryKind.COMBINED, result.sources).label,
            )
            result = result.with_entry(entry)
        else:
            logger.info(f"entries {list(result.sources)} do not overlap: {result.age_range}")
        return result
