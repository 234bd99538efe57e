"""
Generic grid engine for the console list views.

Example:
    from kaos_console.grid import ColumnDescriptor, GridEngine, GridOptions

    engine = GridEngine(records, columns, key_field="id", options=GridOptions())
"""

from kaos_console.grid.columns import ColumnDescriptor, get_field, stringify
from kaos_console.grid.engine import (
    DEFAULT_EMPTY_MESSAGE,
    DEFAULT_LOADING_MESSAGE,
    DEFAULT_PAGE_SIZE,
    GridEngine,
    GridOptions,
    GridView,
)
from kaos_console.grid.errors import ConfigurationError

__all__ = [
    "DEFAULT_EMPTY_MESSAGE",
    "DEFAULT_LOADING_MESSAGE",
    "DEFAULT_PAGE_SIZE",
    "ColumnDescriptor",
    "ConfigurationError",
    "GridEngine",
    "GridOptions",
    "GridView",
    "get_field",
    "stringify",
]
