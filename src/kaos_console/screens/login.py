"""
Login screen for the KaosNet Console.

Operators sign in with a console account (not a player account). The
screen only collects and validates the form; ``ConsoleApp.do_login`` makes
the API call and moves on to the dashboard.
"""

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Center, Vertical
from textual.screen import Screen
from textual.widgets import Button, Input, Label, Static

from kaos_console.api.client import APIError, AuthenticationError


def describe_login_error(exc: APIError, server_url: str) -> str:
    """Operator-facing message for a failed console login."""
    if isinstance(exc, AuthenticationError):
        return "Invalid username or password"
    if exc.status_code == 0:
        return f"Cannot reach {server_url}"
    return f"Login failed: {exc.detail or exc.message}"


class LoginScreen(Screen):
    """Console account sign-in form."""

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    CSS = """
    LoginScreen {
        align: center middle;
    }

    .login-box {
        width: 56;
        height: auto;
        border: round $primary;
        padding: 1 2;
    }

    .login-title {
        text-align: center;
        text-style: bold;
        color: $accent;
    }

    .login-server {
        text-align: center;
        color: $text-muted;
        padding-bottom: 1;
    }

    .login-box Input {
        margin-bottom: 1;
    }

    #login-btn {
        width: 100%;
    }

    #status {
        text-align: center;
        padding-top: 1;
    }
    """

    def compose(self) -> ComposeResult:
        with Center():
            with Vertical(classes="login-box"):
                yield Static("KaosNet Console", classes="login-title")
                yield Static(self.app.config.server_url, classes="login-server")
                yield Label("Username")
                yield Input(placeholder="console account", id="username")
                yield Label("Password")
                yield Input(placeholder="password", password=True, id="password")
                yield Button("Sign in", variant="primary", id="login-btn")
                yield Static("", id="status")

    def on_mount(self) -> None:
        self.query_one("#username", Input).focus()

    @on(Input.Submitted, "#username")
    def handle_username_submitted(self) -> None:
        self.query_one("#password", Input).focus()

    @on(Input.Submitted, "#password")
    @on(Button.Pressed, "#login-btn")
    async def handle_submit(self) -> None:
        await self._attempt_login()

    async def _attempt_login(self) -> None:
        username = self.query_one("#username", Input)
        password = self.query_one("#password", Input)

        if not username.value.strip() or not password.value:
            self._set_status("[red]Username and password are required[/red]")
            (password if username.value.strip() else username).focus()
            return

        self._set_status("[yellow]Signing in...[/yellow]")
        try:
            await self.app.do_login(username.value.strip(), password.value)
        except APIError as exc:
            self._set_status(f"[red]{describe_login_error(exc, self.app.config.server_url)}[/red]")
            password.value = ""
            password.focus()
            return

        self._set_status("")

    def _set_status(self, text: str) -> None:
        self.query_one("#status", Static).update(text)

    def action_quit(self) -> None:
        self.app.exit()
