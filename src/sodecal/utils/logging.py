"""Logging helpers for sodecal.

Modules log through ``get_logger(__name__)``. Only the app entry point
(``sode_app.main``) calls ``configure_logging``; embedding applications keep
their own handlers. Nothing is written to log files.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "sodecal"
LOG_LEVEL_ENV = "SODECAL_LOG_LEVEL"

DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(funcName)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Optional[Union[str, int]]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return int(level)


def _stderr_handler(logger: logging.Logger) -> Optional[logging.Handler]:
    for h in logger.handlers:
        if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr:
            return h
    return None


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    force: bool = False,
) -> None:
    """Send the ``sodecal`` logger to stderr. The root logger is left alone.

    Args:
        level: Level name or number; defaults to $SODECAL_LOG_LEVEL, else INFO.
            Unknown names fall back to INFO.
        fmt: Record format, DEFAULT_FMT if None.
        datefmt: Date format, DEFAULT_DATEFMT if None.
        force: Drop existing handlers first. Otherwise a second call only
            updates the level.
    """
    level = _resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)
    elif _stderr_handler(logger) is not None:
        return

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(
        logging.Formatter(
            fmt=fmt if fmt is not None else DEFAULT_FMT,
            datefmt=datefmt if datefmt is not None else DEFAULT_DATEFMT,
        )
    )
    logger.addHandler(console)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger `name`, or the package logger when None."""
    return logging.getLogger(name or LOGGER_NAME)
