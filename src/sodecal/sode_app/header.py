"""Header for the SODE app: title, theme toggle and source link."""

from __future__ import annotations

import webbrowser
from typing import Callable, Optional

from nicegui import app, ui

THEME_STORAGE_KEY = "sode_dark_mode"


def _open_external(url: str) -> None:
    """Open URL in system browser (native) or new tab (browser)."""
    native = getattr(app, "native", None)
    in_native = getattr(native, "main_window", None) is not None
    if in_native:
        webbrowser.open(url)
    else:
        ui.run_javascript(f'window.open("{url}", "_blank")')


def stored_dark_mode(default: bool = False) -> bool:
    """Dark mode flag persisted for this user."""
    return bool(app.storage.user.get(THEME_STORAGE_KEY, default))


def build_sode_header(
    *,
    on_theme_change: Optional[Callable[[bool], None]] = None,
    source_url: Optional[str] = None,
) -> ui.dark_mode:
    """Build header with title, theme toggle and an optional source link.

    Args:
        on_theme_change: Called with the new dark flag after each toggle.
        source_url: Shown as a link icon when set.

    Returns:
        Dark mode controller for the page.
    """
    dark_mode = ui.dark_mode()
    dark_mode.value = stored_dark_mode()

    def _update_theme_icon() -> None:
        icon = "light_mode" if dark_mode.value else "dark_mode"
        theme_btn.props(f"icon={icon}")

    def _toggle_theme() -> None:
        dark_mode.value = not dark_mode.value
        app.storage.user[THEME_STORAGE_KEY] = dark_mode.value
        _update_theme_icon()
        if on_theme_change is not None:
            on_theme_change(dark_mode.value)

    with ui.header().classes("items-center justify-between").props("dense").style(
        "min-height: 36px; height: 36px; padding: 0 8px;"
    ):
        with ui.row().classes("items-center gap-2"):
            ui.label("SODE Calendar").classes("!text-lg font-bold italic text-white")
            ui.label("season of death for fetal bison").classes("text-xs text-white")

        with ui.row().classes("items-center gap-2"):
            theme_btn = ui.button(
                icon="light_mode" if dark_mode.value else "dark_mode",
                on_click=_toggle_theme,
            ).props("flat round dense text-color=white").tooltip("Toggle dark / light mode")

            if source_url:
                link = ui.icon("open_in_new").classes("text-white cursor-pointer")
                link.on("click", lambda: _open_external(source_url))
                link.tooltip("Open project page")

    return dark_mode
