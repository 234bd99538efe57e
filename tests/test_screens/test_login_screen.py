"""Tests for the console login screen."""

from __future__ import annotations

import pytest
from textual.app import App
from textual.widgets import Button, Input

from kaos_console.api.client import APIError, AuthenticationError
from kaos_console.config import Config
from kaos_console.screens.login import LoginScreen, describe_login_error


class _TestApp(App):
    """Minimal app that records login attempts."""

    def __init__(self, error: APIError | None = None) -> None:
        super().__init__()
        self.config = Config(server_url="http://test", timeout=5.0)
        self.error = error
        self.logins: list[tuple[str, str]] = []

    async def on_mount(self) -> None:
        await self.push_screen(LoginScreen())

    async def do_login(self, username: str, password: str) -> None:
        self.logins.append((username, password))
        if self.error:
            raise self.error


def _capture_status(screen: LoginScreen) -> list[str]:
    messages: list[str] = []
    screen._set_status = messages.append  # type: ignore[method-assign]
    return messages


@pytest.mark.parametrize(
    "error,expected",
    [
        (AuthenticationError("Login failed", 401, "bad"), "Invalid username or password"),
        (APIError("Cannot connect to server", 0), "Cannot reach http://test"),
        (APIError("Login failed", 500, "boom"), "Login failed: boom"),
    ],
)
def test_describe_login_error(error, expected) -> None:
    assert describe_login_error(error, "http://test") == expected


@pytest.mark.asyncio
async def test_missing_password_is_not_submitted() -> None:
    app = _TestApp()

    async with app.run_test() as pilot:
        await pilot.pause()
        screen = pilot.app.screen
        messages = _capture_status(screen)

        screen.query_one("#username", Input).value = "ops"
        screen.query_one("#login-btn", Button).press()
        await pilot.pause()

        assert app.logins == []
        assert messages == ["[red]Username and password are required[/red]"]


@pytest.mark.asyncio
async def test_rejected_login_clears_password() -> None:
    app = _TestApp(error=AuthenticationError("Login failed", 401, "Invalid credentials"))

    async with app.run_test() as pilot:
        await pilot.pause()
        screen = pilot.app.screen
        messages = _capture_status(screen)

        screen.query_one("#username", Input).value = " ops "
        screen.query_one("#password", Input).value = "wrong"
        screen.query_one("#login-btn", Button).press()
        await pilot.pause()

        assert app.logins == [("ops", "wrong")]
        assert messages[-1] == "[red]Invalid username or password[/red]"
        assert screen.query_one("#password", Input).value == ""
