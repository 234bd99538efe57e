"""
Dashboard screen for the KaosNet Console.

The DashboardScreen shows:
- Server connection status, version and uptime
- Session and room counters
- Navigation to the players, storage and auth test screens
- The logged-in operator
"""

from typing import Any

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Static

from kaos_console.api.client import APIError
from kaos_console.screens.auth_test import AuthTestScreen
from kaos_console.screens.formatting import format_uptime
from kaos_console.screens.players import PlayersScreen
from kaos_console.screens.storage import StorageScreen

# Seconds between automatic status refreshes.
STATUS_REFRESH_INTERVAL = 5.0

# (label, widget id) for each row of the status panel, server URL first.
STATUS_ROWS = (
    ("Server:", "server-url"),
    ("Status:", "server-status"),
    ("Version:", "server-version"),
    ("Uptime:", "server-uptime"),
    ("Sessions:", "session-counts"),
    ("Rooms:", "room-counts"),
)


def offline_status(headline: str) -> dict[str, str]:
    """Status panel values when there is nothing to report beyond a headline."""
    values = {widget_id: "-" for _, widget_id in STATUS_ROWS[2:]}
    values["server-status"] = headline
    return values


def describe_server_status(status: dict[str, Any]) -> dict[str, str]:
    """Map a ``GET /api/status`` payload to status panel values."""
    sessions = status.get("sessions") or {}
    rooms = status.get("rooms") or {}
    return {
        "server-status": "[green]Online[/green]",
        "server-version": str(status.get("version") or "-"),
        "server-uptime": format_uptime(status.get("uptime_secs")),
        "session-counts": (
            f"{sessions.get('total', 0)} total, {sessions.get('connected', 0)} connected, "
            f"{sessions.get('authenticated', 0)} authenticated"
        ),
        "room-counts": f"{rooms.get('total', 0)} rooms, {rooms.get('players', 0)} players",
    }


def describe_operator(app: Any) -> tuple[str, str]:
    """Name and role shown in the footer bar."""
    if getattr(app, "demo", False):
        return "demo", "sample data"
    api_client = getattr(app, "api_client", None)
    if api_client is None or not api_client.session.is_authenticated:
        return "Not logged in", "-"
    return api_client.session.username or "Unknown", api_client.session.role or "Unknown"


class DashboardScreen(Screen):
    """
    Main console dashboard.

    Key Bindings:
        r: Refresh server status
        p: Players
        s: Storage
        a: Auth test
        l: Logout
        q, ctrl+q: Quit application
    """

    BINDINGS = [
        Binding("r", "refresh", "Refresh", priority=True),
        Binding("p", "view_players", "Players", priority=True),
        Binding("s", "view_storage", "Storage", priority=True),
        Binding("a", "view_auth_test", "Auth Test", priority=True),
        Binding("l", "logout", "Logout", priority=True),
        Binding("q", "quit", "Quit", priority=True),
        Binding("ctrl+q", "quit", "Quit", priority=True, show=False),
    ]

    CSS = """
    DashboardScreen {
        layout: vertical;
    }

    .dashboard-container {
        padding: 1 2;
    }

    .status-panel {
        border: solid green;
        padding: 1 2;
        height: auto;
        margin-bottom: 1;
    }

    .status-title {
        text-style: bold;
        color: $accent;
        padding-bottom: 1;
    }

    .status-row {
        height: 1;
    }

    .info-label {
        width: 20;
        color: $text-muted;
    }

    .info-value {
        color: $text;
    }

    .actions-panel {
        border: solid $primary;
        padding: 1 2;
        height: auto;
    }

    .action-buttons {
        height: 3;
    }

    .action-button {
        margin-right: 1;
    }

    .user-info {
        dock: bottom;
        height: 3;
        padding: 1 2;
        background: $surface;
        border-top: solid $primary-darken-2;
    }

    .user-label {
        color: $text-muted;
    }

    .user-value {
        color: $success;
        text-style: bold;
    }
    """

    def compose(self) -> ComposeResult:
        """Create the dashboard layout."""
        yield Header()

        with Vertical(classes="dashboard-container"):
            with Vertical(classes="status-panel"):
                yield Static("Server Status", classes="status-title")
                for label, widget_id in STATUS_ROWS:
                    with Horizontal(classes="status-row"):
                        yield Static(label, classes="info-label")
                        yield Static("...", id=widget_id, classes="info-value")

            with Vertical(classes="actions-panel"):
                yield Static("Quick Actions", classes="status-title")
                with Horizontal(classes="action-buttons"):
                    yield Button(
                        "Players", variant="primary", id="btn-players", classes="action-button"
                    )
                    yield Button(
                        "Storage", variant="primary", id="btn-storage", classes="action-button"
                    )
                    yield Button(
                        "Auth Test", variant="default", id="btn-auth", classes="action-button"
                    )
                    yield Button(
                        "Refresh", variant="default", id="btn-refresh", classes="action-button"
                    )
                    yield Button(
                        "Logout", variant="warning", id="btn-logout", classes="action-button"
                    )

        with Horizontal(classes="user-info"):
            yield Static("Logged in as: ", classes="user-label")
            yield Static("...", id="user-name", classes="user-value")
            yield Static("  Role: ", classes="user-label")
            yield Static("...", id="user-role", classes="user-value")

        yield Footer()

    def on_mount(self) -> None:
        name, role = describe_operator(self.app)
        self.query_one("#user-name", Static).update(name)
        self.query_one("#user-role", Static).update(role)
        self.refresh_status()
        self._status_timer = self.set_interval(STATUS_REFRESH_INTERVAL, self.refresh_status)

    def on_unmount(self) -> None:
        timer = getattr(self, "_status_timer", None)
        if timer:
            timer.stop()

    @work(thread=False, exclusive=True, group="dashboard-status")
    async def refresh_status(self) -> None:
        """Poll the server and redraw the status panel."""
        self.query_one("#server-url", Static).update(self.app.config.server_url)

        if getattr(self.app, "demo", False):
            values = offline_status("[yellow]Demo mode[/yellow]")
        else:
            try:
                values = describe_server_status(await self.app.api_client.get_status())
            except APIError as e:
                values = offline_status(f"[red]Error: {e}[/red]")

        for widget_id, text in values.items():
            self.query_one(f"#{widget_id}", Static).update(text)

    # -------------------------------------------------------------------------
    # Button Handlers
    # -------------------------------------------------------------------------

    @on(Button.Pressed, "#btn-players")
    def handle_players_button(self) -> None:
        self.action_view_players()

    @on(Button.Pressed, "#btn-storage")
    def handle_storage_button(self) -> None:
        self.action_view_storage()

    @on(Button.Pressed, "#btn-auth")
    def handle_auth_button(self) -> None:
        self.action_view_auth_test()

    @on(Button.Pressed, "#btn-refresh")
    def handle_refresh_button(self) -> None:
        self.refresh_status()

    @on(Button.Pressed, "#btn-logout")
    async def handle_logout_button(self) -> None:
        await self.action_logout()

    # -------------------------------------------------------------------------
    # Actions (Bound to Keys)
    # -------------------------------------------------------------------------

    def action_refresh(self) -> None:
        """Refresh server status (key: r)."""
        self.refresh_status()

    def action_view_players(self) -> None:
        """Open the players screen (key: p)."""
        self.app.push_screen(PlayersScreen())

    def action_view_storage(self) -> None:
        """Open the storage screen (key: s)."""
        self.app.push_screen(StorageScreen())

    def action_view_auth_test(self) -> None:
        """Open the auth test screen (key: a)."""
        if getattr(self.app, "demo", False):
            self.notify("Auth testing needs a live server", severity="warning")
            return
        self.app.push_screen(AuthTestScreen())

    async def action_logout(self) -> None:
        """Logout and return to login screen (key: l)."""
        await self.app.do_logout()

    def action_quit(self) -> None:
        """Quit the application (key: q)."""
        self.app.exit()
