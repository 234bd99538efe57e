"""Modal dialogs used by the player and storage screens."""

from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static

MODAL_CSS = """
    .confirm-dialog {
        width: 64;
        height: auto;
        border: solid $primary;
        padding: 1 2;
        background: $surface;
    }

    .confirm-title {
        text-style: bold;
        color: $accent;
        padding-bottom: 1;
    }

    .confirm-actions {
        height: 3;
        padding-top: 1;
    }

    .confirm-button {
        margin-right: 1;
    }
"""


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no confirmation prompt for destructive actions."""

    DEFAULT_CSS = (
        """
    ConfirmScreen {
        align: center middle;
    }
    """
        + MODAL_CSS
    )

    def __init__(
        self, title: str, message: str, *, confirm_label: str = "Delete", variant: str = "error"
    ) -> None:
        super().__init__()
        self._title = title
        self._message = message
        self._confirm_label = confirm_label
        self._variant = variant

    def compose(self) -> ComposeResult:
        with Vertical(classes="confirm-dialog"):
            yield Static(self._title, classes="confirm-title")
            yield Static(self._message, id="confirm-message")
            with Horizontal(classes="confirm-actions"):
                yield Button(
                    "Cancel", variant="default", id="confirm-cancel", classes="confirm-button"
                )
                yield Button(
                    self._confirm_label,
                    variant=self._variant,  # type: ignore[arg-type]
                    id="confirm-accept",
                    classes="confirm-button",
                )

    @on(Button.Pressed, "#confirm-cancel")
    def _cancel(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#confirm-accept")
    def _accept(self) -> None:
        self.dismiss(True)


class BanReasonScreen(ModalScreen[str | None]):
    """Prompt for an optional ban reason. Dismisses with None on cancel."""

    DEFAULT_CSS = (
        """
    BanReasonScreen {
        align: center middle;
    }
    """
        + MODAL_CSS
    )

    def __init__(self, username: str) -> None:
        super().__init__()
        self._username = username

    def compose(self) -> ComposeResult:
        with Vertical(classes="confirm-dialog"):
            yield Static(f"Ban {self._username}", classes="confirm-title")
            yield Input(placeholder="Ban reason (optional)", id="ban-reason")
            with Horizontal(classes="confirm-actions"):
                yield Button(
                    "Cancel", variant="default", id="confirm-cancel", classes="confirm-button"
                )
                yield Button(
                    "Ban", variant="warning", id="confirm-accept", classes="confirm-button"
                )

    def on_mount(self) -> None:
        self.query_one("#ban-reason", Input).focus()

    @on(Button.Pressed, "#confirm-cancel")
    def _cancel(self) -> None:
        self.dismiss(None)

    @on(Button.Pressed, "#confirm-accept")
    @on(Input.Submitted, "#ban-reason")
    def _accept(self) -> None:
        self.dismiss(self.query_one("#ban-reason", Input).value.strip())
