"""
Custom widgets for the KaosNet Console.

Available widgets:
    DataGrid: Searchable, paginated DataTable bound to a GridEngine.
"""

from kaos_console.widgets.data_grid import DataGrid

__all__ = ["DataGrid"]
