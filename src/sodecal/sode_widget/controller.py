"""UI-free controller that drives a SODE session.

Each operation returns a SodeUpdate (text lines, figure dicts, error) so the
NiceGUI widget only renders. Domain errors are caught here, logged, and
returned as messages; a failed operation leaves the session unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Union

from sodecal.engine.errors import SodeError
from sodecal.engine.ranges import GestationAgeRange, Interval
from sodecal.engine.session import Entry, Session
from sodecal.reporting.summaries import combine_lines, entry_summary, interval_lines
from sodecal.reporting.tables import calendar_table, entries_table
from sodecal.resolvers.conception_priors import ConceptionCalendar, calendar_catalog, get_calendar
from sodecal.resolvers.gestation_age import GestationAgeResolver
from sodecal.resolvers.specimens import SpecimenSource, read_specimen_table
from sodecal.sode_plots.figures import (
    combined_figure,
    conception_calendar_figure,
    growth_curve_figure,
    interval_figure,
    sode_figure,
)
from sodecal.sode_plots.theme import ThemeMode, resolve_theme
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CALENDAR_INDEX = 2  # aggregated herds, 3 week smooth

NO_RESOLVER = (
    "No depth-length models are loaded; load a metrics or coefficient table, "
    "or enter a gestation-age range directly."
)


@dataclass(frozen=True)
class SodeUpdate:
    """What the UI should show after an operation.

    `figures` maps a slot name ("calendar", "sode", "interval", "combined")
    to a Plotly figure dict.
    """

    lines: tuple[str, ...] = ()
    figures: dict = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SodeController:
    """Owns the Session, the gestation-age resolver and the selected calendar.

    Not shared between clients; the widget creates one per page.
    """

    def __init__(
        self,
        resolver: Optional[GestationAgeResolver] = None,
        *,
        calendar_index: int = DEFAULT_CALENDAR_INDEX,
        theme: Union[str, ThemeMode] = "light",
    ) -> None:
        self.resolver = resolver
        self._theme = resolve_theme(theme)
        self._calendar = get_calendar(calendar_index)
        self._session = Session(self._calendar.values, prior_name=self._calendar.key)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def calendar(self) -> ConceptionCalendar:
        return self._calendar

    @property
    def theme(self) -> ThemeMode:
        return self._theme

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self._session.entries

    @property
    def has_resolver(self) -> bool:
        return self.resolver is not None

    def calendar_options(self) -> dict[int, str]:
        """Catalog index -> label, for a select."""
        return {c.index: c.label for c in calendar_catalog()}

    def entry_options(self) -> dict[int, str]:
        return {e.index: f"{e.index}: {e.label}" for e in self._session.entries}

    def element_options(self) -> list[str]:
        if self.resolver is None:
            return []
        return [e.value for e in self.resolver.elements()]

    def set_theme(self, theme: Union[str, ThemeMode]) -> None:
        self._theme = resolve_theme(theme)

    def set_resolver(self, resolver: Optional[GestationAgeResolver]) -> None:
        self.resolver = resolver
        logger.info(f"resolver set: {resolver is not None}")

    # ------------------------------------------------------------------
    # Figures and tables
    # ------------------------------------------------------------------

    def calendar_figure(self) -> dict:
        return conception_calendar_figure([self._calendar], theme=self._theme)

    def sode_figure(self) -> dict:
        return sode_figure(self._session.entries, theme=self._theme)

    def growth_figure(self) -> Optional[dict]:
        if self.resolver is None:
            return None
        return growth_curve_figure(self.resolver.curves, theme=self._theme)

    def entries_rows(self) -> list[dict]:
        """Entries table as records for ui.table."""
        return entries_table(self._session.entries).to_dict("records")

    def calendar_csv(self) -> str:
        """Day-of-year calendar of every entry as CSV text."""
        return calendar_table(self._session.entries).to_csv(index=False)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def select_calendar(self, index: int) -> SodeUpdate:
        """Switch the conception calendar and start a new, empty session."""
        try:
            calendar = get_calendar(index)
        except ValueError as e:
            return self._fail(str(e))
        dropped = len(self._session)
        self._calendar = calendar
        self._session = Session(calendar.values, prior_name=calendar.key)
        logger.info(f"calendar {calendar.key} selected, {dropped} entries cleared")

        lines = [calendar.label, *calendar.citations]
        if dropped:
            lines.append(f"{dropped} previous entries were cleared.")
        return SodeUpdate(
            lines=tuple(lines),
            figures={"calendar": self.calendar_figure(), "sode": self.sode_figure()},
        )

    def add_specimen(self, element: str, depth_mm: float) -> SodeUpdate:
        """Resolve a measurement and append its entry."""
        if self.resolver is None:
            return self._fail(NO_RESOLVER)
        try:
            resolved = self.resolver.resolve(element, depth_mm)
            entry = self._session.add_measured(
                resolved.age_range, specimen=resolved.specimen_info()
            )
        except SodeError as e:
            return self._fail(str(e))
        return self._entries_update([entry])

    def add_range(self, min_day: int, max_day: int) -> SodeUpdate:
        """Append an entry for a gestation-age range given directly."""
        try:
            entry = self._session.add_measured(GestationAgeRange(int(min_day), int(max_day)))
        except (TypeError, ValueError) as e:
            # InvalidRange is a ValueError
            return self._fail(f"invalid gestation-age range: {e}")
        except SodeError as e:
            return self._fail(str(e))
        return self._entries_update([entry])

    def import_table(self, source: Union[SpecimenSource, Path]) -> SodeUpdate:
        """Resolve every row of a specimen table, then append the entries.

        A table with any row that fails to resolve or convolve appends nothing.
        """
        if self.resolver is None:
            return self._fail(NO_RESOLVER)
        try:
            specimens = read_specimen_table(source)
            resolved = self.resolver.resolve_all(specimens)
        except (SodeError, OSError) as e:
            return self._fail(str(e))

        try:
            added = self._session.add_measured_many(
                [(r.age_range, r.specimen_info()) for r in resolved]
            )
        except SodeError as e:
            return self._fail(str(e))
        logger.info(f"imported {len(added)} specimens")
        return self._entries_update(added)

    def analyze_interval(
        self, indices: Sequence[int], start_day: int, end_day: int
    ) -> SodeUpdate:
        """Probability statements for the selected entries over [start_day, end_day]."""
        try:
            interval = Interval(start_day, end_day)
            result = self._session.analyze_interval(list(indices), interval)
        except (ValueError, IndexError) as e:
            return self._fail(str(e))
        selected = [self._session.entry(i) for i in indices]
        return SodeUpdate(
            lines=tuple(interval_lines(result)),
            figures={"interval": interval_figure(selected, result, theme=self._theme)},
        )

    def combine(self, indices: Sequence[int]) -> SodeUpdate:
        """Combine entries believed to record the same death."""
        try:
            unique = self._session.resolve_indices(indices)
            result = self._session.combine(unique)
        except (SodeError, ValueError, IndexError) as e:
            return self._fail(str(e))
        inputs = [self._session.entry(i) for i in unique]
        figures = {"combined": combined_figure(inputs, result.entry, theme=self._theme)}
        if result.entry is not None:
            figures["sode"] = self.sode_figure()
        return SodeUpdate(lines=tuple(combine_lines(result)), figures=figures)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _entries_update(self, added: Sequence[Entry]) -> SodeUpdate:
        lines: list[str] = []
        for entry in added:
            lines.extend(entry_summary(entry))
        return SodeUpdate(lines=tuple(lines), figures={"sode": self.sode_figure()})

    def _fail(self, message: str) -> SodeUpdate:
        logger.warning(message)
        return SodeUpdate(error=message)
