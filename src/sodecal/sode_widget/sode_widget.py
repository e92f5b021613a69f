"""SODE widget: NiceGUI front end for SodeController.

Calendar select, specimen / range entry, specimen table upload, entry table,
interval and combine controls, a text log and the Plotly figures. Uses Plotly
dicts only for ui.plotly (never go.Figure).
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

import plotly.graph_objects as go
from nicegui import events, ui

from sodecal.engine.cycle_mapper import doy_labels
from sodecal.engine.session import Session
from sodecal.reporting.tables import ENTRY_COLUMNS
from sodecal.sode_plots.theme import ThemeMode
from sodecal.sode_widget.controller import SodeController, SodeUpdate
from sodecal.sode_widget.upload import read_uploaded_bytes, upload_event_file
from sodecal.utils.logging import get_logger

logger = get_logger(__name__)

OnSessionChange = Callable[[Session], None]

ENTRY_TABLE_COLUMNS = [
    {"name": c, "label": c.replace("_", " "), "field": c, "align": "left"} for c in ENTRY_COLUMNS
]


def _safe_call(func: Callable, *args, **kwargs) -> None:
    """Safely call a function, catching 'client deleted' RuntimeErrors only."""
    try:
        func(*args, **kwargs)
    except RuntimeError as e:
        if "deleted" not in str(e).lower():
            raise


class SodeWidget:
    """Season-of-death workbench for one page.

    Emits the Session via on_change after every operation that adds entries
    or replaces the session.
    """

    def __init__(
        self,
        controller: SodeController,
        *,
        on_change: Optional[OnSessionChange] = None,
        theme: Union[str, ThemeMode] = "light",
    ) -> None:
        self._controller = controller
        self._on_change = on_change
        self._controller.set_theme(theme)
        self._day_options = {i + 1: label for i, label in enumerate(doy_labels())}

        self._calendar_select: Optional[ui.select] = None
        self._calendar_plot: Optional[ui.plotly] = None
        self._element_select: Optional[ui.select] = None
        self._depth_input: Optional[ui.number] = None
        self._min_day_input: Optional[ui.number] = None
        self._max_day_input: Optional[ui.number] = None
        self._entry_table: Optional[ui.table] = None
        self._entry_select: Optional[ui.select] = None
        self._start_select: Optional[ui.select] = None
        self._end_select: Optional[ui.select] = None
        self._log: Optional[ui.log] = None
        self._sode_plot: Optional[ui.plotly] = None
        self._result_plot: Optional[ui.plotly] = None
        self._growth_plot: Optional[ui.plotly] = None

    @property
    def controller(self) -> SodeController:
        return self._controller

    def render(self) -> None:
        """Create the widget UI inside the current container."""
        ctrl = self._controller
        empty = go.Figure().to_dict()

        with ui.row().classes("w-full gap-4 items-start"):
            with ui.column().classes("w-96 gap-2"):
                self._calendar_select = ui.select(
                    ctrl.calendar_options(),
                    value=ctrl.calendar.index,
                    label="Conception calendar",
                ).classes("w-full")
                self._calendar_select.on("update:model-value", self._on_calendar_change)

                with ui.card().classes("w-full"):
                    ui.label("Specimen").classes("font-bold")
                    self._element_select = ui.select(
                        ctrl.element_options(), label="Element"
                    ).classes("w-full")
                    self._depth_input = ui.number(
                        "Min. AP diaphyseal depth (mm)", format="%.2f"
                    ).classes("w-full")
                    add_btn = ui.button("Add specimen", on_click=self._on_add_specimen)
                    if not ctrl.has_resolver:
                        add_btn.disable()
                        ui.label("No depth-length models loaded.").classes("text-xs")
                    ui.upload(
                        label="Specimen table (CSV)",
                        on_upload=self._on_upload,
                        auto_upload=True,
                    ).props("accept=.csv").classes("w-full")

                with ui.card().classes("w-full"):
                    ui.label("Gestation-age range (days)").classes("font-bold")
                    with ui.row().classes("w-full gap-2"):
                        self._min_day_input = ui.number("From", min=1, precision=0).classes("flex-1")
                        self._max_day_input = ui.number("To", min=1, precision=0).classes("flex-1")
                    ui.button("Add range", on_click=self._on_add_range)

                with ui.card().classes("w-full"):
                    ui.label("Analysis").classes("font-bold")
                    self._entry_select = ui.select(
                        {}, multiple=True, label="Entries"
                    ).classes("w-full").props("use-chips")
                    with ui.row().classes("w-full gap-2"):
                        self._start_select = ui.select(
                            self._day_options, value=1, label="From"
                        ).classes("flex-1")
                        self._end_select = ui.select(
                            self._day_options, value=len(self._day_options), label="To"
                        ).classes("flex-1")
                    with ui.row().classes("gap-2"):
                        ui.button("Interval", on_click=self._on_analyze)
                        ui.button("Combine", on_click=self._on_combine)
                    ui.button("Download calendars", on_click=self._on_download).props("flat")

            with ui.column().classes("flex-1 gap-2"):
                self._calendar_plot = ui.plotly(ctrl.calendar_figure()).classes("w-full h-48")
                self._sode_plot = ui.plotly(ctrl.sode_figure()).classes("w-full h-72")
                self._result_plot = ui.plotly(empty).classes("w-full h-72")
                self._entry_table = ui.table(
                    columns=ENTRY_TABLE_COLUMNS, rows=ctrl.entries_rows(), row_key="entry"
                ).classes("w-full")
                self._log = ui.log(max_lines=500).classes("w-full h-48")
                growth = ctrl.growth_figure()
                if growth is not None:
                    with ui.expansion("Growth curves").classes("w-full"):
                        self._growth_plot = ui.plotly(growth).classes("w-full h-72")

    def set_theme(self, theme: Union[str, ThemeMode]) -> None:
        """Redraw figures for a new theme."""
        _safe_call(self._set_theme_impl, theme)

    def _set_theme_impl(self, theme: Union[str, ThemeMode]) -> None:
        self._controller.set_theme(theme)
        self._update_plot(self._calendar_plot, self._controller.calendar_figure())
        self._update_plot(self._sode_plot, self._controller.sode_figure())
        if self._growth_plot is not None:
            self._update_plot(self._growth_plot, self._controller.growth_figure())

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _on_calendar_change(self) -> None:
        if self._calendar_select is None or self._calendar_select.value is None:
            return
        self._apply(self._controller.select_calendar(int(self._calendar_select.value)))
        self._emit()

    def _on_add_specimen(self) -> None:
        if self._element_select is None or self._depth_input is None:
            return
        element = self._element_select.value
        depth = self._depth_input.value
        if not element or depth is None:
            ui.notify("Select an element and enter a depth.", type="warning")
            return
        self._apply(self._controller.add_specimen(element, depth))
        self._emit()

    def _on_add_range(self) -> None:
        if self._min_day_input is None or self._max_day_input is None:
            return
        lo, hi = self._min_day_input.value, self._max_day_input.value
        if lo is None or hi is None:
            ui.notify("Enter both ends of the gestation-age range.", type="warning")
            return
        self._apply(self._controller.add_range(int(lo), int(hi)))
        self._emit()

    async def _on_upload(self, e: events.UploadEventArguments) -> None:
        try:
            data = await read_uploaded_bytes(upload_event_file(e))
        except RuntimeError as ex:
            logger.exception(f"upload failed: {ex}")
            ui.notify(f"Upload failed: {ex}", type="negative")
            return
        self._apply(self._controller.import_table(data))
        self._emit()

    def _on_analyze(self) -> None:
        if self._start_select is None or self._end_select is None:
            return
        indices = self._selected_entries()
        if not indices:
            ui.notify("Select at least one entry.", type="warning")
            return
        self._apply(
            self._controller.analyze_interval(
                indices, int(self._start_select.value), int(self._end_select.value)
            )
        )

    def _on_combine(self) -> None:
        indices = self._selected_entries()
        if len(indices) < 2:
            ui.notify("Select at least two entries to combine.", type="warning")
            return
        self._apply(self._controller.combine(indices))
        self._emit()

    def _on_download(self) -> None:
        ui.download(self._controller.calendar_csv().encode("utf-8"), "sode_calendars.csv")

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------

    def _selected_entries(self) -> list[int]:
        if self._entry_select is None or not self._entry_select.value:
            return []
        return [int(i) for i in self._entry_select.value]

    def _apply(self, update: SodeUpdate) -> None:
        _safe_call(self._apply_impl, update)

    def _apply_impl(self, update: SodeUpdate) -> None:
        if self._log is not None:
            for line in update.lines:
                self._log.push(line)
        if update.error is not None:
            ui.notify(update.error, type="negative", multi_line=True)
            if self._log is not None:
                self._log.push(f"Error: {update.error}")

        figures = update.figures
        if "calendar" in figures:
            self._update_plot(self._calendar_plot, figures["calendar"])
        if "sode" in figures:
            self._update_plot(self._sode_plot, figures["sode"])
        for slot in ("interval", "combined"):
            if slot in figures:
                self._update_plot(self._result_plot, figures[slot])
        self._refresh_entries()

    def _refresh_entries(self) -> None:
        if self._entry_table is not None:
            self._entry_table.rows = self._controller.entries_rows()
            self._entry_table.update()
        if self._entry_select is not None:
            options = self._controller.entry_options()
            self._entry_select.set_options(
                options, value=[v for v in (self._entry_select.value or []) if v in options]
            )

    @staticmethod
    def _update_plot(plot: Optional[Any], fig: dict) -> None:
        if plot is None:
            return
        try:
            plot.update_figure(fig)
        except RuntimeError as e:
            if "deleted" not in str(e).lower():
                raise

    def _emit(self) -> None:
        if self._on_change is not None:
            self._on_change(self._controller.session)
