"""Text and table reporting for SODE sessions."""

from sodecal.reporting.summaries import (
    combine_lines,
    entry_summary,
    format_probability,
    interval_label,
    interval_lines,
    segment_lines,
)
from sodecal.reporting.tables import calendar_table, entries_table, segments_table

__all__ = [
    "calendar_table",
    "combine_lines",
    "entries_table",
    "entry_summary",
    "format_probability",
    "interval_label",
    "interval_lines",
    "segment_lines",
    "segments_table",
]
