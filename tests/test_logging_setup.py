"""Tests for the console's optional file logging."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from kaos_console.logging_setup import PACKAGE_LOGGER, configure_logging


@pytest.fixture
def package_logger():
    """Restore the package logger after each test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


def test_without_file_installs_null_handler(package_logger: logging.Logger) -> None:
    logger = configure_logging(None)

    assert logger is package_logger
    assert [type(h) for h in logger.handlers] == [logging.NullHandler]


def test_file_handler_writes_records(tmp_path: Path, package_logger: logging.Logger) -> None:
    log_file = tmp_path / "logs" / "console.log"

    configure_logging(log_file)
    logging.getLogger("kaos_console.grid.engine").info("hello from the grid")
    for handler in package_logger.handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert "INFO kaos_console.grid.engine: hello from the grid" in text
    assert package_logger.propagate is False


def test_reconfiguring_replaces_handlers(tmp_path: Path, package_logger: logging.Logger) -> None:
    configure_logging(tmp_path / "one.log")
    configure_logging(tmp_path / "two.log")

    assert len(package_logger.handlers) == 1
