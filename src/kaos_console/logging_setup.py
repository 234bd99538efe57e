"""Logging setup for the console.

Textual draws over the whole terminal, so log records must never reach
stderr while the app runs. A file handler is installed only when the user
asks for one; otherwise records are dropped by a NullHandler.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

PACKAGE_LOGGER = "kaos_console"


def configure_logging(log_file: Path | None, level: int = logging.INFO) -> logging.Logger:
    """
    Attach a handler to the package logger.

    Args:
        log_file: Destination file, or None to discard log output.
        level: Minimum level written to the file.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file is None:
        logger.addHandler(logging.NullHandler())
        return logger

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
