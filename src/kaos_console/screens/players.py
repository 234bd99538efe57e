"""
Players screen for the KaosNet Console.

Lists every player in a searchable, paginated grid. Activating a row opens
the player detail screen, where the operator can ban, unban or delete the
player. Any change made there triggers a reload so the grid always shows a
fresh collection.
"""

from __future__ import annotations

from typing import Any

from textual import events, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, Input, Static

from kaos_console.api.client import APIError, AuthenticationError
from kaos_console.grid import ColumnDescriptor, GridOptions
from kaos_console.screens.formatting import format_relative_time
from kaos_console.screens.player_detail import PlayerDetailScreen
from kaos_console.widgets.data_grid import DataGrid

PLAYER_SEARCH_FIELDS = frozenset({"username", "id", "email", "display_name"})


def _status_cell(player: dict[str, Any]) -> str:
    return "[red]Banned[/red]" if player.get("banned") else "[green]Active[/green]"


def _record_cell(player: dict[str, Any]) -> str:
    wins = player.get("wins")
    losses = player.get("losses")
    if wins is None and losses is None:
        return "-"
    return f"{wins or 0}/{losses or 0}"


PLAYER_COLUMNS: tuple[ColumnDescriptor[dict[str, Any]], ...] = (
    ColumnDescriptor("username", "Username", width=20),
    ColumnDescriptor("id", "ID", width=14),
    ColumnDescriptor("email", "Email", render=lambda p: p.get("email") or "-", width=28),
    ColumnDescriptor("level", "Level", render=lambda p: str(p.get("level") or "-"), width=6),
    ColumnDescriptor(
        "games_played", "Games", render=lambda p: str(p.get("games_played") or 0), width=6
    ),
    ColumnDescriptor("record", "W/L", render=_record_cell, width=9),
    ColumnDescriptor(
        "last_seen", "Last Seen", render=lambda p: format_relative_time(p.get("last_seen"))
    ),
    ColumnDescriptor("banned", "Status", render=_status_cell, width=8),
)


class PlayersScreen(Screen):
    """
    Player list with search and pagination.

    Key Bindings:
        r: Reload players
        b: Back to dashboard
        ctrl+q: Quit application
        (configurable) next_page / prev_page / focus_search / select
    """

    BINDINGS = [
        Binding("r", "refresh", "Refresh"),
        Binding("b", "back", "Back"),
        Binding("ctrl+q", "quit", "Quit", priority=True, show=False),
    ]

    CSS = """
    PlayersScreen {
        layout: vertical;
    }

    .players-container {
        height: 1fr;
        padding: 1 2;
    }

    .players-title {
        text-style: bold;
        color: $accent;
        padding-bottom: 1;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the player grid layout."""
        yield Header()
        with Vertical(classes="players-container"):
            yield Static("Players", id="players-title", classes="players-title")
            yield DataGrid(
                PLAYER_COLUMNS,
                key_field="id",
                options=GridOptions(
                    searchable=True,
                    search_fields=PLAYER_SEARCH_FIELDS,
                    page_size=self.app.config.page_size,
                    empty_message="No players found",
                    loading=True,
                    loading_message="Loading players...",
                ),
                on_row_activate=self.open_player,
                search_placeholder="Search by username, id, email or display name",
                id="players-grid",
            )
        yield Footer()

    def on_mount(self) -> None:
        """Bind configured keys and load the player list."""
        self._apply_keybindings()
        self.load_players()

    @property
    def grid(self) -> DataGrid:
        return self.query_one("#players-grid", DataGrid)

    def _apply_keybindings(self) -> None:
        """Bind user-configured keys to local actions."""
        bindings = getattr(self.app, "keybindings", None)
        if not bindings:
            return

        self._keybindings_by_key = bindings.actions_by_key()

    def on_key(self, event: events.Key) -> None:
        """Translate configured keys to actions; typing in the search box wins."""
        if isinstance(self.focused, Input):
            return

        bindings_map = getattr(self, "_keybindings_by_key", {})
        action = bindings_map.get(event.key)
        if not action:
            return

        handler = getattr(self, f"action_{action}", None)
        if not handler:
            return

        handler()
        event.stop()

    @work(thread=False, exclusive=True, group="players-load")
    async def load_players(self) -> None:
        """Fetch the players and hand the fresh collection to the grid."""
        grid = self.grid
        grid.set_loading(True)
        try:
            players = await self.app.data_source.list_players()
        except AuthenticationError as exc:
            self.notify(f"Permission denied: {exc.detail}", severity="error")
            grid.set_loading(False)
            return
        except APIError as exc:
            self.notify(f"Failed to load players: {exc}", severity="error")
            grid.set_loading(False)
            return

        grid.load(players)
        grid.set_loading(False)
        self.query_one("#players-title", Static).update(f"Players ({len(players)} total)")

    def open_player(self, player: dict[str, Any]) -> None:
        """Open the detail screen for an activated row."""
        self.grid.select(player.get("id"))
        self.app.push_screen(PlayerDetailScreen(player=player), callback=self._on_detail_closed)

    def _on_detail_closed(self, changed: bool | None) -> None:
        if changed:
            self.load_players()

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def action_refresh(self) -> None:
        self.load_players()

    def action_next_page(self) -> None:
        self.grid.next_page()

    def action_prev_page(self) -> None:
        self.grid.previous_page()

    def action_focus_search(self) -> None:
        self.grid.focus_search()

    def action_cursor_up(self) -> None:
        self.grid.cursor_up()

    def action_cursor_down(self) -> None:
        self.grid.cursor_down()

    def action_select(self) -> None:
        self.grid.activate_cursor_row()

    def action_back(self) -> None:
        self.app.pop_screen()

    def action_quit(self) -> None:
        self.app.exit()
