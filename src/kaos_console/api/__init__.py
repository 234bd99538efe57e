"""
API client modules for the KaosNet Console.

This package contains the HTTP client implementation for communicating
with the platform API. It uses httpx for async HTTP requests.

Example:
    from kaos_console.api import ConsoleAPIClient, APIError

    async with ConsoleAPIClient(config) as client:
        await client.login("admin", "password")
        players = await client.list_players()
"""

from kaos_console.api.client import (
    APIError,
    AuthenticationError,
    ConsoleAPIClient,
    SessionState,
)

__all__ = [
    "APIError",
    "AuthenticationError",
    "ConsoleAPIClient",
    "SessionState",
]
