"""Tests for SodeWidget handlers, with NiceGUI elements mocked."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from sodecal.sode_widget import sode_widget as sode_widget_module
from sodecal.sode_widget.controller import SodeController
from sodecal.sode_widget.sode_widget import SodeWidget, _safe_call


@pytest.fixture
def fake_ui(monkeypatch) -> MagicMock:
    fake = MagicMock()
    monkeypatch.setattr(sode_widget_module, "ui", fake)
    return fake


@pytest.fixture
def widget(controller: SodeController, fake_ui: MagicMock) -> SodeWidget:
    """Widget with every UI attribute replaced by a MagicMock, as after render()."""
    on_change = MagicMock()
    w = SodeWidget(controller, on_change=on_change)
    for name in (
        "_calendar_select",
        "_calendar_plot",
        "_element_select",
        "_depth_input",
        "_min_day_input",
        "_max_day_input",
        "_entry_table",
        "_entry_select",
        "_start_select",
        "_end_select",
        "_log",
        "_sode_plot",
        "_result_plot",
    ):
        setattr(w, name, MagicMock())
    w._entry_select.value = []
    return w


def _pushed(widget: SodeWidget) -> list[str]:
    return [c.args[0] for c in widget._log.push.call_args_list]


def test_ui_attributes_are_none_before_render(controller: SodeController) -> None:
    w = SodeWidget(controller)
    assert w._sode_plot is None
    assert w._log is None
    assert w._entry_table is None
    # handlers are no-ops until render() builds the controls
    w._on_add_range()
    w._on_add_specimen()
    w._on_analyze()
    w.set_theme("dark")
    assert len(controller.session) == 0


def test_theme_is_passed_to_controller(controller: SodeController) -> None:
    SodeWidget(controller, theme="dark")
    assert controller.theme.value == "dark"


def test_add_range_updates_log_plot_table_and_emits(widget: SodeWidget) -> None:
    widget._min_day_input.value = 100
    widget._max_day_input.value = 120
    widget._on_add_range()

    assert len(widget.controller.session) == 1
    assert "Entry 1 (range 100 - 120)." in _pushed(widget)
    widget._sode_plot.update_figure.assert_called_once()
    assert widget._entry_table.rows[0]["entry"] == 1
    widget._entry_select.set_options.assert_called_with({1: "1: range 100 - 120"}, value=[])
    widget._on_change.assert_called_once_with(widget.controller.session)


def test_add_range_missing_value_warns(widget: SodeWidget, fake_ui: MagicMock) -> None:
    widget._min_day_input.value = None
    widget._max_day_input.value = 10
    widget._on_add_range()
    fake_ui.notify.assert_called_once()
    assert fake_ui.notify.call_args.kwargs["type"] == "warning"
    assert len(widget.controller.session) == 0


def test_invalid_range_notifies_error(widget: SodeWidget, fake_ui: MagicMock) -> None:
    widget._min_day_input.value = 50
    widget._max_day_input.value = 10
    widget._on_add_range()
    assert fake_ui.notify.call_args.kwargs["type"] == "negative"
    assert any(line.startswith("Error: invalid gestation-age range") for line in _pushed(widget))
    assert len(widget.controller.session) == 0


def test_add_specimen(widget: SodeWidget, tibia_depth: float) -> None:
    widget._element_select.value = "tibia"
    widget._depth_input.value = tibia_depth
    widget._on_add_specimen()
    assert widget.controller.session.entry(1).label == "tibia"


def test_analyze_updates_result_plot(widget: SodeWidget) -> None:
    widget.controller.add_range(100, 120)
    widget._entry_select.value = [1]
    widget._start_select.value = 1
    widget._end_select.value = 365
    widget._on_analyze()
    widget._result_plot.update_figure.assert_called_once()
    assert _pushed(widget)[0].startswith("No specific hypothesized date interval")


def test_analyze_without_selection_warns(widget: SodeWidget, fake_ui: MagicMock) -> None:
    widget._entry_select.value = []
    widget._on_analyze()
    fake_ui.notify.assert_called_once()
    widget._result_plot.update_figure.assert_not_called()


def test_combine_requires_two_entries(widget: SodeWidget, fake_ui: MagicMock) -> None:
    widget.controller.add_range(100, 120)
    widget._entry_select.value = [1]
    widget._on_combine()
    fake_ui.notify.assert_called_once()
    assert len(widget.controller.session) == 1


def test_combine_appends_entry(widget: SodeWidget) -> None:
    widget.controller.add_range(100, 120)
    widget.controller.add_range(110, 130)
    widget._entry_select.value = [1, 2]
    widget._on_combine()
    assert len(widget.controller.session) == 3
    assert "Combined distribution = Entry 3." in _pushed(widget)
    widget._result_plot.update_figure.assert_called_once()
    options = widget._entry_select.set_options.call_args.args[0]
    assert list(options) == [1, 2, 3]


def test_calendar_change_resets_session(widget: SodeWidget) -> None:
    widget.controller.add_range(100, 120)
    widget._calendar_select.value = 5
    widget._on_calendar_change()
    assert widget.controller.calendar.index == 5
    assert len(widget.controller.session) == 0
    widget._calendar_plot.update_figure.assert_called_once()
    widget._on_change.assert_called_once()


def test_download_sends_csv(widget: SodeWidget, fake_ui: MagicMock) -> None:
    widget.controller.add_range(100, 120)
    widget._on_download()
    content, filename = fake_ui.download.call_args.args
    assert filename == "sode_calendars.csv"
    assert content.startswith(b"day,month,date,entry_1")


@pytest.mark.asyncio
async def test_upload_imports_table(widget: SodeWidget, tibia_depth: float) -> None:
    class FakeUpload:
        name = "specimens.csv"

        async def read(self) -> bytes:
            return f"element,depth\ntibia,{tibia_depth}\n".encode()

    event = MagicMock()
    event.file = FakeUpload()
    await widget._on_upload(event)
    assert len(widget.controller.session) == 1


@pytest.mark.asyncio
async def test_upload_without_file_notifies(widget: SodeWidget, fake_ui: MagicMock) -> None:
    event = MagicMock()
    event.file = None
    event.content = None
    await widget._on_upload(event)
    assert fake_ui.notify.call_args.kwargs["type"] == "negative"
    assert len(widget.controller.session) == 0


def test_deleted_plot_is_ignored(widget: SodeWidget) -> None:
    widget._sode_plot.update_figure.side_effect = RuntimeError("The client has been deleted")
    widget._min_day_input.value = 100
    widget._max_day_input.value = 120
    widget._on_add_range()
    assert len(widget.controller.session) == 1


def test_safe_call_reraises_other_runtime_errors() -> None:
    def boom() -> None:
        raise RuntimeError("something else")

    with pytest.raises(RuntimeError):
        _safe_call(boom)

    def deleted() -> None:
        raise RuntimeError("Client deleted")

    _safe_call(deleted)


def test_set_theme_redraws_growth_plot(widget: SodeWidget) -> None:
    widget._growth_plot = MagicMock()
    widget.set_theme("dark")
    fig = widget._growth_plot.update_figure.call_args.args[0]
    assert fig["layout"]["paper_bgcolor"] == "#000000"
