"""
Plain-text summaries of entries, segments, interval analyses and combines.

Each function returns a list of lines; callers join them or show them one
label per line. Dates are "Mon D" labels on the 365-day calendar.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from sodecal.engine.combined import CombineResult
from sodecal.engine.cycle_mapper import doy_label
from sodecal.engine.errors import CombineStatus
from sodecal.engine.interval_analyzer import IntervalResult
from sodecal.engine.ranges import Interval
from sodecal.engine.segments import Segment, find_segments
from sodecal.engine.session import Entry, EntryKind

NO_OVERLAP = "Age distributions do not overlap, no combined estimate possible."
NO_MASS = "The distribution has no probability mass; no season of death estimate."
DEGENERATE = (
    "No specific hypothesized date interval and only one element selected. "
    "No probabilistic statement."
)


def format_probability(p: float) -> str:
    """Probabilities print with six significant digits."""
    return f"{p:.6g}"


def interval_label(interval: Interval) -> str:
    return f"{doy_label(interval.start_day)} - {doy_label(interval.end_day)}"


def segment_lines(
    calendar: np.ndarray, *, combined: bool = False, segments: Sequence[Segment] | None = None
) -> list[str]:
    """Describe where a calendar's mass lies.

    One segment gives a single date-range sentence; several give a count
    line followed by one line per segment with its mass.
    """
    if segments is None:
        segments = find_segments(calendar)
    if not segments:
        return [NO_MASS]

    def span(seg: Segment, joiner: str) -> str:
        return f"{doy_label(seg.low_day)}{joiner}{doy_label(seg.high_day)}"

    if len(segments) == 1:
        if combined:
            return [f"Entire combined SODE is distributed from {span(segments[0], ' to ')}."]
        return [f"The SODE is distributed between {span(segments[0], ' and ')}."]

    prefix = "Combined SODE" if combined else "The SODE"
    lines = [f"{prefix} is distributed across {len(segments)} intervals."]
    for seg in segments:
        mass = format_probability(seg.mass)
        if combined:
            lines.append(f"{mass} of the combined SODE is distributed from {span(seg, ' to ')}.")
        else:
            lines.append(
                f"{mass} of the modelled date distribution falls between {span(seg, ' and ')}."
            )
    return lines


def entry_header(entry: Entry) -> str:
    if entry.specimen is not None:
        return (
            f"Entry {entry.index} ({entry.specimen.element}; minimum antero-posterior "
            f"diaphyseal depth: {entry.specimen.depth_mm:g} mm)."
        )
    if entry.provenance.kind is EntryKind.COMBINED:
        return f"Entry {entry.index} ({entry.provenance.label})."
    return f"Entry {entry.index} ({entry.label})."


def entry_summary(entry: Entry) -> list[str]:
    """Header, length / age ranges and segment lines for one entry."""
    lines = [entry_header(entry)]
    spec = entry.specimen
    if spec is not None and spec.length_min_mm is not None and spec.length_max_mm is not None:
        lines.append(
            f"Estimated diaphyseal length: {spec.length_min_mm:.2f} - {spec.length_max_mm:.2f} mm"
        )
    lines.append(f"Estimated gestation age: {entry.age_range} days")
    lines.extend(segment_lines(entry.calendar, combined=entry.provenance.kind is EntryKind.COMBINED))
    return lines


def interval_lines(result: IntervalResult) -> list[str]:
    """Probability statements that are meaningful for `result`."""
    if result.is_degenerate:
        return [DEGENERATE]

    label = interval_label(result.interval)
    same_day = format_probability(result.same_day_probability)
    all_within = format_probability(result.all_within_probability)

    if result.n_calendars == 1:
        return [f"The probability that the element was deposited within {label} is {all_within}."]
    if result.interval.is_full_year:
        return [f"The probability that all elements were deposited on the same date is {same_day}."]
    return [
        f"The probability that all elements were deposited on the same date "
        f"within the interval {label} is {same_day}.",
        f"The probability that all elements were deposited within the interval {label} "
        f"is {all_within}.",
    ]


def combine_lines(result: CombineResult) -> list[str]:
    """Outcome of a combine: no-overlap notice or the combined entry summary."""
    if result.status is CombineStatus.EMPTY_INTERSECTION:
        return [NO_OVERLAP]
    lines = [f"Combined gestation age: {result.age_range} days"]
    lines.extend(segment_lines(result.calendar, combined=True))
    if result.entry is not None:
        lines.append(f"Combined distribution = Entry {result.entry.index}.")
    return lines
