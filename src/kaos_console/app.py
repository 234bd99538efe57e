"""
Main application module for the KaosNet Console.

This module defines the ConsoleApp class, the Textual application for the
platform console. It manages:
- Screen navigation (login -> dashboard, or straight to the dashboard in
  demo mode)
- API client lifecycle
- The data source every list screen reads from

Entry Point:
    The main() function serves as the CLI entry point, configured in
    pyproject.toml as the "kaos-console" console script.

Example:
    # Run from command line
    kaos-console --server http://localhost:7350

    # Offline, against the bundled sample data
    kaos-console --demo

    # Or programmatically
    from kaos_console import Config, ConsoleApp

    app = ConsoleApp(Config.from_args())
    app.run()
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

from textual.app import App
from textual.binding import Binding

from kaos_console.api.client import APIError, ConsoleAPIClient
from kaos_console.config import Config
from kaos_console.data.sources import ApiDataSource, ConsoleDataSource, SampleDataSource
from kaos_console.keybindings import KeyBindings
from kaos_console.logging_setup import configure_logging
from kaos_console.screens.dashboard import DashboardScreen
from kaos_console.screens.login import LoginScreen

logger = logging.getLogger(__name__)


class ConsoleApp(App):
    """
    Main Textual application for the KaosNet Console.

    Attributes:
        config: Application configuration.
        keybindings: User key bindings, loaded once at startup.
        api_client: HTTP client for server communication. Created on mount.
        data_source: Backend for the player and storage screens. Injected,
                     or chosen on mount from the demo flag.

    Lifecycle:
        1. on_mount: Creates the API client and data source, then pushes
           LoginScreen (live) or DashboardScreen (demo)
        2. do_login: Authenticates, switches to DashboardScreen
        3. do_logout: Clears session, returns to LoginScreen
        4. on_unmount: Logs out and closes the API client
    """

    TITLE = "KaosNet Console"
    SUB_TITLE = "Platform Administration"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True, show=False),
        Binding("ctrl+q", "quit", "Quit", priority=True, show=False),
    ]

    CSS = """
    Screen {
        background: $surface;
    }
    """

    def __init__(self, config: Config, data_source: ConsoleDataSource | None = None) -> None:
        """
        Initialize the console application.

        Args:
            config: Application configuration object.
            data_source: Optional backend override; when omitted the demo
                         flag decides between sample data and the live API.
        """
        super().__init__()
        self.config = config
        self.demo = config.demo
        self.keybindings = KeyBindings.load()
        self.api_client: ConsoleAPIClient | None = None
        self.data_source: ConsoleDataSource | None = data_source

    async def on_mount(self) -> None:
        """Create the API client and data source, then show the first screen."""
        self.api_client = ConsoleAPIClient(self.config)
        await self.api_client.__aenter__()

        if self.data_source is None:
            if self.demo:
                self.data_source = SampleDataSource.from_yaml()
            else:
                self.data_source = ApiDataSource(self.api_client)

        if self.demo:
            logger.info("Starting in demo mode")
            await self.push_screen(DashboardScreen())
        else:
            logger.info("Connecting to %s", self.config.server_url)
            await self.push_screen(LoginScreen())

    async def on_unmount(self) -> None:
        """Log out from the server (if authenticated) and close the client."""
        if self.api_client:
            if self.api_client.session.is_authenticated:
                try:
                    await self.api_client.logout()
                except APIError as exc:
                    logger.info("Logout on shutdown failed: %s", exc)
            await self.api_client.__aexit__(None, None, None)
            self.api_client = None

    async def do_login(self, username: str, password: str) -> None:
        """
        Perform login and transition to the dashboard.

        Raises:
            AuthenticationError: If the credentials are rejected.
            APIError: If the server cannot be reached.
        """
        if not self.api_client:
            raise RuntimeError("API client not initialized")

        await self.api_client.login(username, password)
        self.push_screen(DashboardScreen())

    async def do_logout(self) -> None:
        """Log out and return to the previous screen (login, or exit in demo mode)."""
        if self.api_client:
            await self.api_client.logout()

        if self.demo:
            self.exit()
            return
        self.pop_screen()


def main(args: Sequence[str] | None = None) -> int:
    """
    Main entry point for the console.

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:].

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        config = Config.from_args(args)
        configure_logging(config.log_file)

        app = ConsoleApp(config)
        app.run()

        return 0

    except KeyboardInterrupt:
        return 130

    except Exception as e:
        logger.exception("Console terminated")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
