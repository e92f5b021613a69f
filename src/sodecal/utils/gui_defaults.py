"""Default classes and props for the NiceGUI elements used by the SODE app."""

from __future__ import annotations

from nicegui import ui

from sodecal.utils.logging import get_logger

logger = get_logger(__name__)

# map tailwind text size to quasar size
TEXT_SIZE_QUASAR = {
    "text-xs": "xs",
    "text-sm": "sm",
    "text-base": "md",
    "text-lg": "lg",
}


def setUpGuiDefaults(text_size: str = "text-base") -> None:
    """Set up default classes and props for all ui elements.

    Args:
        text_size: Tailwind CSS text size class ('text-xs', 'text-sm',
            'text-base', 'text-lg'). Unknown sizes fall back to 'text-base'.
    """
    if text_size not in TEXT_SIZE_QUASAR:
        logger.warning(f"unknown text_size {text_size!r}, using 'text-base'")
        text_size = "text-base"
    text_size_quasar = TEXT_SIZE_QUASAR[text_size]

    logger.debug(f'using classes text_size:"{text_size}" text_size_quasar:{text_size_quasar}')

    ui.label.default_classes(f"{text_size} select-text")
    ui.label.default_props("dense")

    ui.button.default_classes(text_size)
    ui.button.default_props("dense")

    ui.checkbox.default_classes(text_size)
    ui.checkbox.default_props(f"dense size={text_size_quasar}")

    ui.select.default_classes(text_size)
    ui.select.default_props("dense")

    ui.input.default_classes(text_size)
    ui.input.default_props("dense")

    ui.number.default_classes(text_size)
    ui.number.default_props("dense")

    ui.expansion.default_classes(text_size)
    ui.expansion.default_props("dense")

    ui.radio.default_classes(text_size)
    ui.radio.default_props("dense")
