"""Logging setup shared by the desktop and web entry points."""

import logging
import os
import sys
from typing import Optional

# Top-level packages whose loggers get the handlers
PACKAGE_LOGGERS = ("models", "export", "utils", "gui", "web")

FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def level_from_env(default: int = logging.INFO) -> int:
    """Read ``QR_FIXER_LOG_LEVEL`` (e.g. "DEBUG"), falling back to *default*."""
    name = os.environ.get("QR_FIXER_LOG_LEVEL", "").upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configure console (and optionally file) logging for the app packages.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to also write logs to.
    """
    formatter = logging.Formatter(FORMAT, datefmt="%H:%M:%S")

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    for name in PACKAGE_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # Avoid duplicate output when called again (e.g. Flask reloader)
        if logger.hasHandlers():
            logger.handlers.clear()
        for handler in handlers:
            logger.addHandler(handler)
        logger.propagate = False

    logging.getLogger("utils").info("Logging initialized.")
