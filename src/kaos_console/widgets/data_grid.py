"""
DataGrid widget: a Textual front end for the grid engine.

The widget owns one ``GridEngine`` and renders its state into a search box,
a ``DataTable``, a status line for the loading/empty message, and a pager.
All engine transitions are invoked synchronously from the widget's event
handlers; the widget re-renders after each one.

Row activation (Enter or click on a row) is resolved back to the exact
record on the visible page and forwarded two ways: the host's
``on_row_activate`` callback (if given) and a ``DataGrid.RowActivated``
message that bubbles to the screen.

Example:
    grid = DataGrid(
        columns=[ColumnDescriptor("username", "Username")],
        key_field="id",
        options=GridOptions(searchable=True, search_fields=frozenset({"username"})),
        id="players-grid",
    )
    ...
    grid.load(players)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Button, DataTable, Input, Static

from kaos_console.grid import ColumnDescriptor, GridEngine, GridOptions, GridView
from kaos_console.grid.columns import FieldGetter

logger = logging.getLogger(__name__)


def format_page_label(view: GridView[Any]) -> str:
    return f"Page {view.current_page} of {view.total_pages} ({view.filtered_count} records)"


class DataGrid(Widget):
    """
    Searchable, paginated table bound to a GridEngine.

    Args:
        columns: Ordered column schema.
        key_field: Field holding each record's unique identifier.
        options: Grid options; validated immediately.
        records: Initial collection.
        on_row_activate: Host callback invoked with the activated record.
        field_getter: Optional field accessor passed to the engine.
        search_placeholder: Placeholder text for the search box.

    Raises:
        ConfigurationError: If the options are invalid.

    CSS Classes:
        .grid-search: Search input (only when searchable).
        .grid-table: The DataTable.
        .grid-message: Loading/empty message line.
        .grid-pager: Pager row (hidden when pagination is off).
    """

    DEFAULT_CSS = """
    DataGrid {
        height: 1fr;
        layout: vertical;
    }

    DataGrid .grid-search {
        margin-bottom: 1;
    }

    DataGrid .grid-table {
        height: 1fr;
        width: 100%;
    }

    DataGrid .grid-table > .datatable--header {
        text-style: bold;
        background: $primary;
    }

    DataGrid .grid-message {
        color: $text-muted;
        padding: 1 2;
        text-align: center;
    }

    DataGrid .grid-pager {
        height: 3;
        align: center middle;
    }

    DataGrid .grid-page-label {
        width: auto;
        padding: 1 2;
    }
    """

    class RowActivated(Message):
        """Posted when a row is activated (Enter or click)."""

        def __init__(self, grid: DataGrid, record: Any) -> None:
            super().__init__()
            self.grid = grid
            self.record = record

        @property
        def control(self) -> DataGrid:
            return self.grid

    def __init__(
        self,
        columns: Sequence[ColumnDescriptor[Any]],
        key_field: str,
        options: GridOptions | None = None,
        *,
        records: Iterable[Any] = (),
        on_row_activate: Callable[[Any], Any] | None = None,
        field_getter: FieldGetter | None = None,
        search_placeholder: str = "Search...",
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self._host_callback = on_row_activate
        self._search_placeholder = search_placeholder
        self._selected_id: str | None = None
        self._ready = False
        self.engine: GridEngine[Any] = GridEngine(
            records,
            columns,
            key_field,
            options,
            on_row_activate=self._dispatch_activation,
            field_getter=field_getter,
        )

    def compose(self) -> ComposeResult:
        """Create the search box, table, message line and pager."""
        if self.engine.options.searchable:
            yield Input(placeholder=self._search_placeholder, classes="grid-search")
        yield DataTable(classes="grid-table")
        yield Static("", classes="grid-message")
        with Horizontal(classes="grid-pager"):
            yield Button("< Prev", classes="grid-prev")
            yield Static("", classes="grid-page-label")
            yield Button("Next >", classes="grid-next")

    def on_mount(self) -> None:
        """Configure table columns and render the initial state."""
        table = self.query_one(".grid-table", DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        for column in self.engine.columns:
            table.add_column(column.header, key=column.key, width=column.width)

        self.query_one(".grid-pager", Horizontal).display = self.engine.options.pagination
        self._ready = True
        self.refresh_rows()

    # -------------------------------------------------------------------------
    # Host API
    # -------------------------------------------------------------------------

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def view(self) -> GridView[Any]:
        """Current presentation snapshot."""
        return self.engine.snapshot(self._selected_id)

    def load(self, records: Iterable[Any]) -> None:
        """Replace the collection, keeping the query and page."""
        self.engine.set_records(records)
        self.refresh_rows()

    def set_loading(self, loading: bool) -> None:
        self.engine.set_loading(loading)
        self.refresh_rows()

    def select(self, key: Any) -> None:
        """Highlight the row with this key (None clears the highlight)."""
        self._selected_id = None if key is None else str(key)
        self.refresh_rows()

    def set_search_query(self, query: str) -> None:
        """Apply a query and mirror it into the search box."""
        self.engine.set_search_query(query)
        if self._ready and self.engine.options.searchable:
            search = self.query_one(".grid-search", Input)
            if search.value != query:
                with search.prevent(Input.Changed):
                    search.value = query
        self.refresh_rows()

    def set_page(self, page: int) -> None:
        self.engine.set_page(page)
        self.refresh_rows()

    def next_page(self) -> None:
        self.engine.next_page()
        self.refresh_rows()

    def previous_page(self) -> None:
        self.engine.previous_page()
        self.refresh_rows()

    def focus_search(self) -> None:
        if self.engine.options.searchable:
            self.query_one(".grid-search", Input).focus()

    def focus_table(self) -> None:
        self.query_one(".grid-table", DataTable).focus()

    def cursor_up(self) -> None:
        self.query_one(".grid-table", DataTable).action_cursor_up()

    def cursor_down(self) -> None:
        self.query_one(".grid-table", DataTable).action_cursor_down()

    def activate_cursor_row(self) -> Any:
        """Activate the record under the table cursor, if any."""
        table = self.query_one(".grid-table", DataTable)
        if not table.row_count:
            return None
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        return self.engine.activate_key(row_key.value)

    def refresh_rows(self) -> None:
        """Render the engine state into the child widgets."""
        if not self._ready:
            return

        view = self.engine.snapshot(self._selected_id)
        table = self.query_one(".grid-table", DataTable)
        table.clear()
        for record in view.rows:
            table.add_row(*self.engine.render_row(record), key=self.engine.row_key(record))

        if view.selected_key is not None:
            table.move_cursor(row=table.get_row_index(view.selected_key), animate=False)

        message = self.query_one(".grid-message", Static)
        message.update(view.message or "")
        message.display = view.message is not None

        self.query_one(".grid-page-label", Static).update(format_page_label(view))
        self.query_one(".grid-prev", Button).disabled = not view.has_previous
        self.query_one(".grid-next", Button).disabled = not view.has_next

    # -------------------------------------------------------------------------
    # Event Handlers
    # -------------------------------------------------------------------------

    @on(Input.Changed, ".grid-search")
    def _handle_search_changed(self, event: Input.Changed) -> None:
        event.stop()
        self.engine.set_search_query(event.value)
        self.refresh_rows()

    @on(Input.Submitted, ".grid-search")
    def _handle_search_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.focus_table()

    @on(Button.Pressed, ".grid-prev")
    def _handle_previous(self, event: Button.Pressed) -> None:
        event.stop()
        self.previous_page()

    @on(Button.Pressed, ".grid-next")
    def _handle_next(self, event: Button.Pressed) -> None:
        event.stop()
        self.next_page()

    @on(DataTable.RowSelected, ".grid-table")
    def _handle_row_selected(self, event: DataTable.RowSelected) -> None:
        event.stop()
        if event.row_key.value is None:
            return
        self.engine.activate_key(event.row_key.value)

    def _dispatch_activation(self, record: Any) -> None:
        logger.debug("Row activated: %s", self.engine.row_key(record))
        self.post_message(self.RowActivated(self, record))
        if self._host_callback is not None:
            self._host_callback(record)
