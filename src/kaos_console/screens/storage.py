"""
Storage screen for the KaosNet Console.

Two grids side by side: the storage collections on the left, and the objects
of the selected collection on the right. An optional User ID filter is sent
to the backend with the object listing. Activating an object opens its
detail screen; ``n`` opens the create form.
"""

from __future__ import annotations

from typing import Any

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, Static

from kaos_console.api.client import APIError
from kaos_console.grid import ColumnDescriptor, GridOptions, get_field
from kaos_console.screens.create_storage_object import CreateStorageObjectScreen
from kaos_console.screens.formatting import format_permissions, format_timestamp, truncate
from kaos_console.screens.storage_detail import StorageObjectDetailScreen
from kaos_console.widgets.data_grid import DataGrid

OBJECT_SEARCH_FIELDS = frozenset({"key", "user_id", "collection"})
OBJECT_KEY_FIELD = "object_id"

COLLECTION_COLUMNS: tuple[ColumnDescriptor[dict[str, Any]], ...] = (
    ColumnDescriptor("name", "Collection"),
)

OBJECT_COLUMNS: tuple[ColumnDescriptor[dict[str, Any]], ...] = (
    ColumnDescriptor("key", "Key", width=24),
    ColumnDescriptor("user_id", "User ID", width=14),
    ColumnDescriptor("version", "Version", width=8),
    ColumnDescriptor("permissions", "Permissions", render=format_permissions, width=30),
    ColumnDescriptor(
        "updated_at", "Updated", render=lambda obj: format_timestamp(obj.get("updated_at"))
    ),
)


def _escape_part(value: Any) -> str:
    return str(value or "").replace("\\", "\\\\").replace(":", "\\:")


def object_id(record: Any) -> str:
    """
    Composite identity of a storage object: ``collection:key:user_id``.

    Backslashes and colons inside a part are backslash-escaped, so keys or
    user ids that contain colons cannot collide.
    """
    return ":".join(
        _escape_part(get_field(record, name)) for name in ("collection", "key", "user_id")
    )


def storage_field(record: Any, name: str) -> Any:
    """Field getter that also exposes the synthesized composite key."""
    if name == OBJECT_KEY_FIELD:
        return object_id(record)
    return get_field(record, name)


class StorageScreen(Screen):
    """
    Storage browser.

    Key Bindings:
        n: Create a storage object
        r: Reload collections and objects
        b: Back to dashboard
        ctrl+q: Quit application
    """

    BINDINGS = [
        Binding("n", "create", "New Object"),
        Binding("r", "refresh", "Refresh"),
        Binding("b", "back", "Back"),
        Binding("ctrl+q", "quit", "Quit", priority=True, show=False),
    ]

    CSS = """
    StorageScreen {
        layout: vertical;
    }

    .storage-container {
        height: 1fr;
        padding: 1 2;
    }

    .storage-sidebar {
        width: 32;
        margin-right: 2;
    }

    .storage-main {
        width: 1fr;
    }

    .storage-title {
        text-style: bold;
        color: $accent;
        padding-bottom: 1;
    }

    .storage-filter {
        height: auto;
        margin-bottom: 1;
    }

    .storage-filter Input {
        width: 1fr;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._collection: str | None = None

    def compose(self) -> ComposeResult:
        """Compose the collection and object grids."""
        yield Header()
        with Horizontal(classes="storage-container"):
            with Vertical(classes="storage-sidebar"):
                yield Static("Collections", classes="storage-title")
                yield DataGrid(
                    COLLECTION_COLUMNS,
                    key_field="name",
                    options=GridOptions(
                        pagination=False,
                        empty_message="No collections",
                        loading=True,
                        loading_message="Loading collections...",
                    ),
                    on_row_activate=self.open_collection,
                    id="collections-grid",
                )
            with Vertical(classes="storage-main"):
                yield Static("Objects", id="objects-title", classes="storage-title")
                with Horizontal(classes="storage-filter"):
                    yield Input(placeholder="Filter by User ID", id="user-id-filter")
                    yield Button("Apply", variant="primary", id="btn-apply-filter")
                    yield Button("New", variant="success", id="btn-create")
                yield DataGrid(
                    OBJECT_COLUMNS,
                    key_field=OBJECT_KEY_FIELD,
                    options=GridOptions(
                        searchable=True,
                        search_fields=OBJECT_SEARCH_FIELDS,
                        page_size=self.app.config.page_size,
                        empty_message="No objects found",
                    ),
                    on_row_activate=self.open_object,
                    field_getter=storage_field,
                    search_placeholder="Search by key, user id or collection",
                    id="objects-grid",
                )
        yield Footer()

    def on_mount(self) -> None:
        self.load_collections()

    @property
    def collections_grid(self) -> DataGrid:
        return self.query_one("#collections-grid", DataGrid)

    @property
    def objects_grid(self) -> DataGrid:
        return self.query_one("#objects-grid", DataGrid)

    @property
    def collection(self) -> str | None:
        """The collection whose objects are shown."""
        return self._collection

    @property
    def user_id_filter(self) -> str | None:
        value = self.query_one("#user-id-filter", Input).value.strip()
        return value or None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @work(thread=False, exclusive=True, group="storage-collections")
    async def load_collections(self) -> None:
        """Fetch the collection names."""
        grid = self.collections_grid
        grid.set_loading(True)
        try:
            names = await self.app.data_source.list_collections()
        except APIError as exc:
            self.notify(f"Failed to load collections: {exc}", severity="error")
            grid.set_loading(False)
            return

        grid.load([{"name": name} for name in names])
        grid.set_loading(False)

        if self._collection is not None and self._collection not in names:
            self._collection = None
            grid.select(None)
            self.objects_grid.load([])
        elif self._collection is not None:
            self.load_objects()

    @work(thread=False, exclusive=True, group="storage-objects")
    async def load_objects(self) -> None:
        """Fetch the objects of the selected collection."""
        if self._collection is None:
            return

        grid = self.objects_grid
        grid.set_loading(True)
        try:
            objects = await self.app.data_source.list_storage_objects(
                self._collection, self.user_id_filter
            )
        except APIError as exc:
            self.notify(f"Failed to load objects: {exc}", severity="error")
            grid.set_loading(False)
            return

        grid.load(objects)
        grid.set_loading(False)
        self.query_one("#objects-title", Static).update(
            f"Objects in {truncate(self._collection, 40)} ({len(objects)})"
        )

    # -------------------------------------------------------------------------
    # Row Activation
    # -------------------------------------------------------------------------

    def open_collection(self, record: dict[str, Any]) -> None:
        """Show the objects of an activated collection."""
        self._collection = str(record.get("name"))
        self.collections_grid.select(self._collection)
        self.objects_grid.select(None)
        self.load_objects()

    def open_object(self, record: dict[str, Any]) -> None:
        """Open the detail screen for an activated object."""
        self.objects_grid.select(object_id(record))
        self.app.push_screen(
            StorageObjectDetailScreen(storage_object=record), callback=self._on_child_closed
        )

    def _on_child_closed(self, changed: Any) -> None:
        if changed:
            self.load_collections()

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    @on(Input.Submitted, "#user-id-filter")
    def handle_filter_submitted(self) -> None:
        self.load_objects()

    @on(Button.Pressed, "#btn-apply-filter")
    def handle_filter_button(self) -> None:
        self.load_objects()

    @on(Button.Pressed, "#btn-create")
    def handle_create_button(self) -> None:
        self.action_create()

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def action_create(self) -> None:
        self.app.push_screen(
            CreateStorageObjectScreen(
                collection=self._collection or "", user_id=self.user_id_filter or ""
            ),
            callback=self._on_child_closed,
        )

    def action_refresh(self) -> None:
        self.load_collections()

    def action_back(self) -> None:
        self.app.pop_screen()

    def action_quit(self) -> None:
        self.app.exit()
