"""Storage object detail screen: metadata, pretty value, delete."""

from __future__ import annotations

from typing import Any

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Static

from kaos_console.api.client import APIError
from kaos_console.screens.formatting import format_json, format_permissions, format_timestamp
from kaos_console.screens.modals import ConfirmScreen


class StorageObjectDetailScreen(Screen[bool]):
    """
    Read-only view of one storage object.

    Dismisses with True when the object was deleted.
    """

    BINDINGS = [
        Binding("b", "back", "Back", priority=True),
        Binding("d", "delete", "Delete", priority=True),
        Binding("ctrl+q", "quit", "Quit", priority=True, show=False),
    ]

    CSS = """
    StorageObjectDetailScreen {
        layout: vertical;
    }

    .detail-container {
        height: 1fr;
        padding: 1 2;
    }

    .summary-title {
        text-style: bold;
        color: $accent;
        padding-bottom: 1;
    }

    .summary-box {
        border: solid $primary;
        padding: 1 2;
        height: auto;
        margin-bottom: 1;
    }

    .summary-row {
        height: auto;
    }

    .summary-label {
        width: 14;
        color: $text-muted;
    }

    .object-value {
        border: solid $secondary;
        padding: 1 2;
        height: auto;
    }

    .detail-actions {
        height: 3;
        margin-top: 1;
    }

    .action-button {
        margin-right: 1;
    }
    """

    def __init__(self, storage_object: dict[str, Any]) -> None:
        super().__init__()
        self._object = storage_object

    def compose(self) -> ComposeResult:
        obj = self._object
        yield Header()
        with VerticalScroll(classes="detail-container"):
            yield Static(
                f"{obj.get('collection', '-')} / {obj.get('key', '-')}", classes="summary-title"
            )
            with Vertical(classes="summary-box"):
                for label, value in (
                    ("Collection", str(obj.get("collection") or "-")),
                    ("Key", str(obj.get("key") or "-")),
                    ("User ID", str(obj.get("user_id") or "-")),
                    ("Version", str(obj.get("version") or "-")),
                    ("Permissions", format_permissions(obj)),
                    ("Created", format_timestamp(obj.get("created_at"))),
                    ("Updated", format_timestamp(obj.get("updated_at"))),
                ):
                    yield Horizontal(
                        Static(f"{label}:", classes="summary-label"),
                        Static(value, markup=False),
                        classes="summary-row",
                    )
            yield Static("Value", classes="summary-title")
            yield Static(
                format_json(obj.get("value")),
                id="object-value",
                classes="object-value",
                markup=False,
            )
            with Horizontal(classes="detail-actions"):
                yield Button("Delete", variant="error", id="btn-delete", classes="action-button")
                yield Button("Back", variant="default", id="btn-back", classes="action-button")
        yield Footer()

    @on(Button.Pressed, "#btn-delete")
    def handle_delete_button(self) -> None:
        self.action_delete()

    @on(Button.Pressed, "#btn-back")
    def handle_back_button(self) -> None:
        self.action_back()

    @work(thread=False, exclusive=True, group="storage-delete")
    async def delete_object(self) -> None:
        """Confirm, then delete the object through the data source."""
        obj = self._object
        confirmed = await self.app.push_screen_wait(
            ConfirmScreen(
                "Delete Storage Object",
                f"Delete {obj.get('collection')}/{obj.get('key')} owned by {obj.get('user_id')}?",
            )
        )
        if not confirmed:
            return

        try:
            await self.app.data_source.delete_storage_object(
                str(obj.get("collection")), str(obj.get("key")), str(obj.get("user_id"))
            )
        except APIError as exc:
            self.notify(f"Failed to delete: {exc}", severity="error")
            return

        self.notify("Storage object deleted", severity="information")
        self.dismiss(True)

    def action_delete(self) -> None:
        self.delete_object()

    def action_back(self) -> None:
        self.dismiss(False)

    def action_quit(self) -> None:
        self.app.exit()
