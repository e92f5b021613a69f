"""SODE app: standalone NiceGUI application for SodeWidget.

Runs in native, web, or Docker modes via env vars. Uses @ui.page("/") pattern.

Run:
    python -m sodecal.sode_app.sode_app

Env vars:
    SODE_GUI_NATIVE: 1/0 (default 0)
    SODE_GUI_RELOAD: 1/0 (default 0)
    HOST: bind host (default 127.0.0.1 native, 0.0.0.0 web)
    PORT: bind port (default find_open_port native, 8080 web)
"""

from __future__ import annotations

import multiprocessing as mp
import os
from multiprocessing import freeze_support

from nicegui import ui

from sodecal.engine.session import Session
from sodecal.sode_app import header
from sodecal.sode_app.config import SodeAppConfig
from sodecal.sode_widget.controller import SodeController
from sodecal.sode_widget.sode_widget import SodeWidget
from sodecal.utils.gui_defaults import setUpGuiDefaults
from sodecal.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

STORAGE_SECRET = "sodecal-sode-app-session-secret"


def _env_bool(name: str, default: bool) -> bool:
    """Parse env var as bool; if unset/invalid returns default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _env_int(name: str, default: int) -> int:
    """Parse env var as int; if unset/invalid returns default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def build_controller(cfg: SodeAppConfig, *, theme: str = "light") -> tuple[SodeController, list[str]]:
    """Controller for the configured calendar and tables.

    A resolver that cannot be built is reported in the returned messages and
    the controller falls back to direct range entry.
    """
    messages: list[str] = []
    try:
        resolver = cfg.build_resolver()
    except (OSError, ValueError) as e:
        logger.exception(f"could not build the gestation-age resolver: {e}")
        messages.append(f"Depth-length models not loaded: {e}")
        resolver = None
    if resolver is None and not messages:
        messages.append("No depth-length tables configured; enter gestation-age ranges directly.")
    return SodeController(resolver, calendar_index=cfg.data.calendar_index, theme=theme), messages


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------

@ui.page("/")
def home() -> None:
    """Home page: header + SodeWidget for the configured calendar."""
    cfg = SodeAppConfig.load()
    setUpGuiDefaults(cfg.data.text_size)
    ui.page_title("SODE Calendar")

    theme = "dark" if header.stored_dark_mode() else "light"
    controller, messages = build_controller(cfg, theme=theme)

    def _on_change(session: Session) -> None:
        if controller.calendar.index != cfg.data.calendar_index:
            cfg.data.calendar_index = controller.calendar.index
            try:
                cfg.save()
            except OSError:
                ui.notify("Could not save settings.", type="warning")

    widget = SodeWidget(controller, on_change=_on_change, theme=theme)
    header.build_sode_header(
        on_theme_change=lambda dark: widget.set_theme("dark" if dark else "light"),
    )

    with ui.column().classes("w-full gap-4 p-4"):
        for message in messages:
            ui.label(message).classes("text-warning")
        try:
            widget.render()
        except Exception as e:
            logger.exception(f"Failed to build SODE widget: {e}")
            ui.label(f"Failed to load: {e}").classes("text-negative")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(*, reload: bool | None = None, native_bool: bool | None = None) -> None:
    """Start the SODE application.

    Defaults (no env vars, no args):
      - native=False
      - reload=False

    Env vars (used when arg is None):
      - SODE_GUI_NATIVE: 1/0
      - SODE_GUI_RELOAD: 1/0
      - HOST: bind host
      - PORT: bind port
    """
    configure_logging()
    native_bool = _env_bool("SODE_GUI_NATIVE", False) if native_bool is None else native_bool
    reload = _env_bool("SODE_GUI_RELOAD", False) if reload is None else reload

    from nicegui import native as native_module
    if native_bool:
        port = _env_int("PORT", native_module.find_open_port())
    else:
        port = _env_int("PORT", 8080)

    default_host = "127.0.0.1" if native_bool else "0.0.0.0"
    host = os.getenv("HOST", default_host)

    logger.info(f"Starting SODE app: port={port} reload={reload} native={native_bool}")

    run_kwargs: dict = {
        "host": host,
        "port": port,
        "reload": reload,
        "native": native_bool,
        "storage_secret": STORAGE_SECRET,
        "title": "SODE Calendar",
    }
    if native_bool:
        run_kwargs["window_size"] = (1200, 800)
    ui.run(**run_kwargs)


if __name__ == "__main__":
    freeze_support()
    if mp.current_process().name == "MainProcess":
        main()
    else:
        logger.debug(f"Skipping GUI startup in worker process: {mp.current_process().name}")
