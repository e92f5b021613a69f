"""Plotly figure dicts for SODE calendars and growth curves."""

from sodecal.sode_plots.figures import (
    combined_figure,
    conception_calendar_figure,
    growth_curve_figure,
    interval_figure,
    sode_figure,
)
from sodecal.sode_plots.theme import ThemeMode, resolve_theme

__all__ = [
    "ThemeMode",
    "combined_figure",
    "conception_calendar_figure",
    "growth_curve_figure",
    "interval_figure",
    "resolve_theme",
    "sode_figure",
]
