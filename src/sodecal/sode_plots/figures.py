"""Plotly figures for conception calendars, SODE calendars and growth curves.

Every function returns a Plotly figure dict (never go.Figure) for
ui.plotly / update_figure.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np
import plotly.graph_objects as go

from sodecal.engine.cycle_mapper import CYCLE_MONTHS, YEAR_LENGTH, doy_labels, month_bands
from sodecal.engine.interval_analyzer import IntervalResult
from sodecal.engine.session import Entry
from sodecal.resolvers.conception_priors import ConceptionCalendar
from sodecal.resolvers.growth_curves import GrowthCurves
from sodecal.resolvers.specimens import Element
from sodecal.sode_plots.theme import (
    ThemeMode,
    get_band_color,
    get_grid_color,
    get_theme_colors,
    get_theme_template,
    resolve_theme,
    series_color,
)
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)

ThemeArg = Optional[Union[str, ThemeMode]]

INTERVAL_COLOR = "rgba(255, 165, 0, 0.25)"
ENVELOPE_COLOR = "rgba(220, 20, 60, 0.5)"


def _prior_month_bands() -> list[tuple[str, int, int]]:
    """(month, first, last) positions (1-based) of the Jun 1 .. Jan 31 prior."""
    bands = []
    start = 1
    for name, n_days in CYCLE_MONTHS[:8]:
        bands.append((name, start, start + n_days - 1))
        start += n_days
    return bands


def _apply_layout(
    fig: go.Figure,
    theme_mode: ThemeMode,
    *,
    bands: Sequence[tuple[str, int, int]],
    xtitle: str,
    ytitle: str,
    title: Optional[str] = None,
) -> None:
    """Theme colors, month-labelled x axis and alternating month shading."""
    bg_color, fg_color = get_theme_colors(theme_mode)
    grid_color = get_grid_color(theme_mode)
    band_color = get_band_color(theme_mode)

    for i, (_name, first, last) in enumerate(bands):
        if i % 2 == 0:
            fig.add_vrect(
                x0=first - 0.5,
                x1=last + 0.5,
                fillcolor=band_color,
                line_width=0,
                layer="below",
            )

    if title:
        fig.update_layout(title=dict(text=title))
    fig.update_layout(
        template=get_theme_template(theme_mode),
        paper_bgcolor=bg_color,
        plot_bgcolor=bg_color,
        font=dict(color=fg_color),
        xaxis=dict(
            title=xtitle,
            color=fg_color,
            gridcolor=grid_color,
            tickmode="array",
            tickvals=[(first + last) / 2 for _, first, last in bands],
            ticktext=[name for name, _, _ in bands],
            range=[bands[0][1] - 0.5, bands[-1][2] + 0.5],
            showgrid=False,
        ),
        yaxis=dict(title=ytitle, color=fg_color, gridcolor=grid_color, rangemode="tozero"),
        margin=dict(l=0, r=20, t=40 if title else 10, b=20),
        legend=dict(orientation="h", y=-0.15),
    )


def _step_trace(values: np.ndarray, name: str, color: str, *, x=None, fill: bool = False) -> go.Scatter:
    if x is None:
        x = list(range(1, len(values) + 1))
    return go.Scatter(
        x=x,
        y=np.asarray(values, dtype=float).tolist(),
        mode="lines",
        line=dict(shape="hv", color=color, width=1.5),
        fill="tozeroy" if fill else None,
        name=name,
    )


def _year_trace(entry: Entry, i: int, labels: list[str], *, fill: bool = False) -> go.Scatter:
    trace = _step_trace(entry.calendar, f"Entry {entry.index}: {entry.label}", series_color(i), fill=fill)
    trace.customdata = labels
    trace.hovertemplate = "%{customdata}<br>p=%{y:.4g}<extra>%{fullData.name}</extra>"
    return trace


def conception_calendar_figure(
    calendars: Sequence[ConceptionCalendar],
    theme: ThemeArg = None,
) -> dict:
    """Step plot of one or more conception calendars over Jun 1 .. Jan 31.

    Args:
        calendars: Calendars to draw, e.g. a raw series and its smooth.
        theme: Theme mode (DARK or LIGHT). Defaults to LIGHT if None.
    """
    theme_mode = resolve_theme(theme)
    fig = go.Figure()
    for i, cal in enumerate(calendars):
        fig.add_trace(_step_trace(cal.values, cal.label, series_color(i)))
    _apply_layout(
        fig,
        theme_mode,
        bands=_prior_month_bands(),
        xtitle="Conception date",
        ytitle="Probability",
    )
    return fig.to_dict()


def sode_figure(
    entries: Sequence[Entry],
    theme: ThemeArg = None,
    *,
    title: Optional[str] = None,
) -> dict:
    """One hv step trace per entry over the 365-day calendar."""
    theme_mode = resolve_theme(theme)
    labels = doy_labels()
    fig = go.Figure()
    for i, entry in enumerate(entries):
        fig.add_trace(_year_trace(entry, i, labels))
    _apply_layout(
        fig,
        theme_mode,
        bands=month_bands(),
        xtitle="Season of death",
        ytitle="Probability",
        title=title,
    )
    return fig.to_dict()


def interval_figure(
    entries: Sequence[Entry],
    result: IntervalResult,
    theme: ThemeArg = None,
) -> dict:
    """Selected entries with the interval shaded and the per-day minimum filled.

    A wrapping interval is drawn as two rectangles.
    """
    theme_mode = resolve_theme(theme)
    labels = doy_labels()
    fig = go.Figure()
    for start, end in result.interval.pieces():
        fig.add_vrect(
            x0=start - 0.5,
            x1=end + 0.5,
            fillcolor=INTERVAL_COLOR,
            line_width=0,
            layer="below",
        )
    for i, entry in enumerate(entries):
        fig.add_trace(_year_trace(entry, i, labels))
    if len(entries) > 1:
        fig.add_trace(
            go.Scatter(
                x=list(range(1, YEAR_LENGTH + 1)),
                y=result.min_probs.tolist(),
                mode="lines",
                line=dict(shape="hv", color=ENVELOPE_COLOR, width=0),
                fill="tozeroy",
                fillcolor=ENVELOPE_COLOR,
                name="overlap",
            )
        )
    _apply_layout(
        fig,
        theme_mode,
        bands=month_bands(),
        xtitle="Season of death",
        ytitle="Probability",
    )
    return fig.to_dict()


def combined_figure(
    inputs: Sequence[Entry],
    combined: Optional[Entry],
    theme: ThemeArg = None,
) -> dict:
    """Input entries as lines plus the combined calendar filled.

    `combined` is None when the ranges do not overlap; only inputs are drawn.
    """
    theme_mode = resolve_theme(theme)
    labels = doy_labels()
    fig = go.Figure()
    for i, entry in enumerate(inputs):
        fig.add_trace(_year_trace(entry, i, labels))
    if combined is not None:
        fig.add_trace(_year_trace(combined, len(inputs), labels, fill=True))
    _apply_layout(
        fig,
        theme_mode,
        bands=month_bands(),
        xtitle="Season of death",
        ytitle="Probability",
        title="Combined estimate" if combined is not None else "No overlap",
    )
    return fig.to_dict()


def growth_curve_figure(
    curves: GrowthCurves,
    elements: Optional[Sequence[Union[str, Element]]] = None,
    theme: ThemeArg = None,
) -> dict:
    """Min/max diaphysis length band per element over gestation days.

    With the antiquus adjustment applied, the max curve scaled by the
    2.5 / 97.5% length ratios is drawn dashed.
    """
    theme_mode = resolve_theme(theme)
    bg_color, fg_color = get_theme_colors(theme_mode)
    grid_color = get_grid_color(theme_mode)
    selected = [Element.parse(e) for e in elements] if elements else list(Element)
    days = curves.days.tolist()

    fig = go.Figure()
    for i, element in enumerate(selected):
        color = series_color(i)
        name = element.value
        fig.add_trace(
            go.Scatter(x=days, y=curves.min_curve(element).tolist(), mode="lines",
                       line=dict(color=color, width=1), name=f"{name} min",
                       legendgroup=name)
        )
        fig.add_trace(
            go.Scatter(x=days, y=curves.max_curve(element).tolist(), mode="lines",
                       line=dict(color=color, width=1), fill="tonexty",
                       name=f"{name} max", legendgroup=name)
        )
        if curves.bands is not None:
            for suffix in ("lb", "ub"):
                band = np.asarray(curves.bands[f"{name}_max_{suffix}"], dtype=float)
                fig.add_trace(
                    go.Scatter(x=days, y=band.tolist(), mode="lines",
                               line=dict(color=color, width=1, dash="dash"),
                               name=f"{name} max {suffix}", legendgroup=name,
                               showlegend=False)
                )

    fig.update_layout(
        template=get_theme_template(theme_mode),
        paper_bgcolor=bg_color,
        plot_bgcolor=bg_color,
        font=dict(color=fg_color),
        xaxis=dict(title="Gestation day", color=fg_color, gridcolor=grid_color),
        yaxis=dict(title="Diaphysis length (mm)", color=fg_color, gridcolor=grid_color),
        margin=dict(l=0, r=20, t=10, b=20),
    )
    logger.debug(f"growth curve figure for {[e.value for e in selected]}")
    return fig.to_dict()
