"""Logging configuration for the CV intake pipeline."""

import logging
import sys
from typing import Optional

from cv_intake.config import LOG_LEVEL

ROOT_LOGGER_NAME = "cv_intake"
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def _configure_root() -> logging.Logger:
    """One stdout handler on the package logger; module loggers propagate to it."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        root.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))
        root.propagate = False
    return root


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get a logger under the package namespace (names outside it are nested under it)."""
    _configure_root()
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger
