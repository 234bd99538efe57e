"""
KaosNet Console - terminal administration console for the KaosNet platform.

This package provides a Textual-based terminal interface for browsing and
moderating players, inspecting the storage service, and testing player
authentication flows. It talks to the server only through its REST API.

Every list view is driven by the generic grid engine in
``kaos_console.grid``, which handles search, pagination and row selection
independent of the record shape.

Example:
    # Run the console
    kaos-console --server http://localhost:7350

    # Or with environment variables
    KAOS_CONSOLE_URL=http://10.0.0.1:7350 kaos-console

    # Offline against bundled sample data
    kaos-console --demo
"""

from kaos_console.app import ConsoleApp, main
from kaos_console.config import Config

__all__ = [
    "Config",
    "ConsoleApp",
    "main",
]

__version__ = "0.1.0"
