"""
Player detail screen for the KaosNet Console.

Displays a single player's profile, devices, linked social accounts and
moderation status, and provides ban/unban/delete actions. The screen
dismisses with True when the player was changed so the list can reload.
"""

from __future__ import annotations

from typing import Any

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Static

from kaos_console.api.client import APIError
from kaos_console.screens.formatting import format_relative_time, format_timestamp
from kaos_console.screens.modals import BanReasonScreen, ConfirmScreen


def describe_status(player: dict[str, Any]) -> str:
    """Return the moderation status line for a player."""
    if not player.get("banned"):
        return "[green]Active[/green]"
    reason = player.get("ban_reason")
    return f"[red]Banned: {reason}[/red]" if reason else "[red]Banned[/red]"


def describe_social_links(player: dict[str, Any]) -> str:
    links = player.get("social_links") or []
    if not links:
        return "-"
    return ", ".join(f"{link.get('provider')}: {link.get('provider_id')}" for link in links)


class PlayerDetailScreen(Screen[bool]):
    """
    Player detail and moderation screen.

    Key Bindings:
        b: Back (dismiss)
        ctrl+q: Quit application
    """

    BINDINGS = [
        Binding("b", "back", "Back", priority=True),
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    CSS = """
    PlayerDetailScreen {
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
        width: 18;
        color: $text-muted;
    }

    .summary-value {
        color: $text;
    }

    .detail-actions {
        height: 3;
    }

    .action-button {
        margin-right: 1;
    }
    """

    def __init__(self, player: dict[str, Any]) -> None:
        """Initialize with the player record activated in the grid."""
        super().__init__()
        self._player = player

    def compose(self) -> ComposeResult:
        """Compose the player summary and action buttons."""
        player = self._player
        email = player.get("email") or "-"
        if player.get("email") and player.get("email_verified"):
            email = f"{email} (verified)"
        devices = player.get("devices") or []

        yield Header()
        with VerticalScroll(classes="detail-container"):
            yield Static(f"Player: {player.get('username', '-')}", classes="summary-title")
            with Vertical(classes="summary-box"):
                yield self._build_summary_row("ID", str(player.get("id", "-")))
                yield self._build_summary_row("Username", str(player.get("username") or "-"))
                yield self._build_summary_row(
                    "Display Name", str(player.get("display_name") or "-")
                )
                yield self._build_summary_row("Email", email)
                yield self._build_summary_row("Level", str(player.get("level") or "-"))
                yield self._build_summary_row(
                    "Games",
                    f"{player.get('games_played') or 0} played, "
                    f"{player.get('wins') or 0} won, {player.get('losses') or 0} lost",
                )
                yield self._build_summary_row("Devices", "\n".join(devices) or "-")
                yield self._build_summary_row("Social Links", describe_social_links(player))
                yield self._build_summary_row("Created", format_timestamp(player.get("created_at")))
                yield self._build_summary_row(
                    "Last Seen", format_relative_time(player.get("last_seen"))
                )
                yield self._build_summary_row("Status", describe_status(player), "player-status")

            with Horizontal(classes="detail-actions"):
                if player.get("banned"):
                    yield Button(
                        "Unban", variant="success", id="btn-unban", classes="action-button"
                    )
                else:
                    yield Button("Ban", variant="warning", id="btn-ban", classes="action-button")
                yield Button("Delete", variant="error", id="btn-delete", classes="action-button")
                yield Button("Back", variant="default", id="btn-back", classes="action-button")
        yield Footer()

    def _build_summary_row(self, label: str, value: str, value_id: str | None = None) -> Horizontal:
        """Build a labeled summary row."""
        return Horizontal(
            Static(f"{label}:", classes="summary-label"),
            Static(value or "-", id=value_id, classes="summary-value"),
            classes="summary-row",
        )

    @property
    def player_id(self) -> str:
        return str(self._player.get("id", ""))

    # -------------------------------------------------------------------------
    # Button Handlers
    # -------------------------------------------------------------------------

    @on(Button.Pressed, "#btn-ban")
    def handle_ban_button(self) -> None:
        self.ban_player()

    @on(Button.Pressed, "#btn-unban")
    def handle_unban_button(self) -> None:
        self.unban_player()

    @on(Button.Pressed, "#btn-delete")
    def handle_delete_button(self) -> None:
        self.delete_player()

    @on(Button.Pressed, "#btn-back")
    def handle_back_button(self) -> None:
        self.action_back()

    # -------------------------------------------------------------------------
    # Moderation Workers
    # -------------------------------------------------------------------------

    @work(thread=False, exclusive=True, group="player-action")
    async def ban_player(self) -> None:
        """Prompt for a reason and ban the player."""
        reason = await self.app.push_screen_wait(
            BanReasonScreen(username=str(self._player.get("username", self.player_id)))
        )
        if reason is None:
            return

        try:
            await self.app.data_source.ban_player(self.player_id, reason or None)
        except APIError as exc:
            self.notify(f"Failed to ban: {exc}", severity="error")
            return

        self.notify("Player banned", severity="information")
        self.dismiss(True)

    @work(thread=False, exclusive=True, group="player-action")
    async def unban_player(self) -> None:
        """Lift the player's ban."""
        try:
            await self.app.data_source.unban_player(self.player_id)
        except APIError as exc:
            self.notify(f"Failed to unban: {exc}", severity="error")
            return

        self.notify("Player unbanned", severity="information")
        self.dismiss(True)

    @work(thread=False, exclusive=True, group="player-action")
    async def delete_player(self) -> None:
        """Confirm and permanently delete the player."""
        confirmed = await self.app.push_screen_wait(
            ConfirmScreen(
                "Delete Player",
                f"Permanently delete {self._player.get('username', self.player_id)}?",
            )
        )
        if not confirmed:
            return

        try:
            await self.app.data_source.delete_player(self.player_id)
        except APIError as exc:
            self.notify(f"Failed to delete: {exc}", severity="error")
            return

        self.notify("Player deleted", severity="information")
        self.dismiss(True)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def action_back(self) -> None:
        self.dismiss(False)

    def action_quit(self) -> None:
        self.app.exit()
