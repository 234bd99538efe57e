"""
Record sources for the console.

Example:
    from kaos_console.data import ApiDataSource, SampleDataSource

    source = SampleDataSource.from_yaml()
    players = await source.list_players()
"""

from kaos_console.data.sources import (
    ApiDataSource,
    ConsoleDataSource,
    SampleDataSource,
)

__all__ = [
    "ApiDataSource",
    "ConsoleDataSource",
    "SampleDataSource",
]
