"""
Create storage object screen for the KaosNet Console.

A single form for writing one object into the storage service:
- Collection, key and owning user id
- A JSON value, parsed locally so invalid JSON never reaches the server
- Read permission (No Access / Owner Only / Public) and write permission
  (No Access / Owner Only)
"""

from __future__ import annotations

import json
from typing import Any

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Center, Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Input, Label, Select, Static, TextArea

from kaos_console.api.client import APIError
from kaos_console.screens.formatting import PERMISSION_LABELS

READ_PERMISSIONS: list[tuple[str, int]] = [
    (label, code) for code, label in PERMISSION_LABELS.items()
]
WRITE_PERMISSIONS: list[tuple[str, int]] = [
    (label, code) for code, label in PERMISSION_LABELS.items() if code < 2
]
DEFAULT_PERMISSION = 1


def build_storage_payload(
    collection: str,
    key: str,
    user_id: str,
    raw_value: str,
    permission_read: int = DEFAULT_PERMISSION,
    permission_write: int = DEFAULT_PERMISSION,
) -> dict[str, Any]:
    """
    Validate form input and build the create request body.

    Raises:
        ValueError: If a required field is blank or the value is not JSON.
    """
    collection = collection.strip()
    key = key.strip()
    user_id = user_id.strip()

    if not collection:
        raise ValueError("Collection is required")
    if not key:
        raise ValueError("Key is required")
    if not user_id:
        raise ValueError("User ID is required")

    try:
        value = json.loads(raw_value or "{}")
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON value: {exc.msg}") from exc

    return {
        "collection": collection,
        "key": key,
        "user_id": user_id,
        "value": value,
        "permission_read": int(permission_read),
        "permission_write": int(permission_write),
    }


class CreateStorageObjectScreen(Screen[bool]):
    """
    Form for creating (or overwriting) a storage object.

    Dismisses with True after a successful write.
    """

    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("ctrl+q", "quit", "Quit", priority=True, show=False),
    ]

    CSS = """
    CreateStorageObjectScreen {
        layout: vertical;
    }

    .form-box {
        width: 80;
        height: auto;
        border: solid $primary;
        padding: 1 2;
    }

    .form-title {
        text-style: bold;
        color: $accent;
        padding-bottom: 1;
    }

    .form-label {
        padding-top: 1;
    }

    .form-value {
        height: 8;
    }

    .form-permissions Select {
        width: 1fr;
        margin-right: 1;
    }

    .form-permissions {
        height: auto;
    }

    .form-actions {
        height: 3;
        padding-top: 1;
    }

    .action-button {
        margin-right: 1;
    }

    .form-status {
        padding-top: 1;
    }
    """

    def __init__(self, collection: str = "", user_id: str = "") -> None:
        super().__init__()
        self._collection = collection
        self._user_id = user_id

    def compose(self) -> ComposeResult:
        yield Header()
        with Center():
            with Vertical(classes="form-box"):
                yield Static("Create Storage Object", classes="form-title")
                yield Label("Collection:", classes="form-label")
                yield Input(value=self._collection, placeholder="e.g. player_data", id="collection")
                yield Label("Key:", classes="form-label")
                yield Input(placeholder="e.g. settings", id="key")
                yield Label("User ID:", classes="form-label")
                yield Input(value=self._user_id, placeholder="Owning user id", id="user-id")
                yield Label("Value (JSON):", classes="form-label")
                yield TextArea("{}", id="value", classes="form-value")
                with Horizontal(classes="form-permissions"):
                    with Vertical():
                        yield Label("Read Permission:", classes="form-label")
                        yield Select(
                            READ_PERMISSIONS,
                            value=DEFAULT_PERMISSION,
                            allow_blank=False,
                            id="permission-read",
                        )
                    with Vertical():
                        yield Label("Write Permission:", classes="form-label")
                        yield Select(
                            WRITE_PERMISSIONS,
                            value=DEFAULT_PERMISSION,
                            allow_blank=False,
                            id="permission-write",
                        )
                with Horizontal(classes="form-actions"):
                    yield Button(
                        "Create", variant="primary", id="btn-create", classes="action-button"
                    )
                    yield Button(
                        "Cancel", variant="default", id="btn-cancel", classes="action-button"
                    )
                yield Static("", id="status", classes="form-status")
        yield Footer()

    def on_mount(self) -> None:
        target = "#key" if self._collection else "#collection"
        self.query_one(target, Input).focus()

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.action_back()

    @on(Button.Pressed, "#btn-create")
    async def handle_create(self) -> None:
        await self._attempt_create()

    async def _attempt_create(self) -> None:
        status = self.query_one("#status", Static)

        try:
            payload = build_storage_payload(
                self.query_one("#collection", Input).value,
                self.query_one("#key", Input).value,
                self.query_one("#user-id", Input).value,
                self.query_one("#value", TextArea).text,
                self.query_one("#permission-read", Select).value,  # type: ignore[arg-type]
                self.query_one("#permission-write", Select).value,  # type: ignore[arg-type]
            )
        except ValueError as exc:
            status.update(f"[red]{exc}[/red]")
            return

        status.update("[yellow]Saving...[/yellow]")

        try:
            await self.app.data_source.create_storage_object(payload)
        except APIError as exc:
            status.update(f"[red]{exc.detail or exc.message}[/red]")
            return

        self.notify(f"Saved {payload['collection']}/{payload['key']}", severity="information")
        self.dismiss(True)

    def action_back(self) -> None:
        self.dismiss(False)

    def action_quit(self) -> None:
        self.app.exit()
