"""Light/dark theme helpers shared by every SODE figure."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

import plotly.colors


class ThemeMode(str, Enum):
    """UI theme mode.

    Used by plotting functions to coordinate theme settings.
    """

    DARK = "dark"
    LIGHT = "light"


def resolve_theme(theme: Optional[Union[str, ThemeMode]]) -> ThemeMode:
    """Convert str to ThemeMode. None and unknown names are LIGHT."""
    if isinstance(theme, ThemeMode):
        return theme
    if theme is None:
        return ThemeMode.LIGHT
    if str(theme).lower() in ("dark", "plotly_dark"):
        return ThemeMode.DARK
    return ThemeMode.LIGHT


def get_theme_colors(theme: ThemeMode) -> tuple[str, str]:
    """Get background and foreground colors for a theme."""
    if theme is ThemeMode.DARK:
        return "#000000", "#ffffff"
    return "#ffffff", "#000000"


def get_theme_template(theme: ThemeMode) -> str:
    """Get Plotly template name for a theme."""
    if theme is ThemeMode.DARK:
        return "plotly_dark"
    return "plotly_white"


def get_grid_color(theme: ThemeMode) -> str:
    return "rgba(255,255,255,0.2)" if theme is ThemeMode.DARK else "#cccccc"


def get_band_color(theme: ThemeMode) -> str:
    """Fill for alternating month bands."""
    return "rgba(255,255,255,0.08)" if theme is ThemeMode.DARK else "rgba(0,0,0,0.06)"


def series_color(i: int) -> str:
    """Qualitative color for the i-th (0-based) trace."""
    palette = plotly.colors.qualitative.Plotly
    return palette[i % len(palette)]
