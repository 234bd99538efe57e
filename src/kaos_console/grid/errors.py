"""Exceptions raised by the grid engine.

Only misconfiguration is reported as an exception. Data-driven conditions
(empty collections, missing fields, out-of-range pages) are absorbed by the
engine and reflected in the rendered output instead.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a grid is configured with an invalid option combination.

    Args:
        message: Human-readable description of the problem.
        option: Name of the offending option, when a single one is at fault.
    """

    def __init__(self, message: str, *, option: str | None = None) -> None:
        super().__init__(message)
        self.option = option
