"""
sodecal: season-of-death (SODE) calendars for fetal bison remains.

This package provides:
- engine: circular death-date convolution, segments, interval analysis and
  combined estimates (numpy only)
- resolvers: conception calendars and depth -> gestation-age resolution
- reporting, sode_plots: text, tables and Plotly figure dicts
- sode_widget, sode_app: NiceGUI widget and standalone application

For logging configuration in standalone scripts:
    ```python
    from sodecal.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```

When used as a library, logging is handled by the parent application's
configuration.
"""

import logging

from sodecal.utils.logging import configure_logging, get_logger

# NullHandler until an application calls configure_logging().
_logger = logging.getLogger("sodecal")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "configure_logging",
    "get_logger",
]

__version__ = "0.1.0"
