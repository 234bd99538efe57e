"""
HTTP API client for the KaosNet platform.

This module provides an async HTTP client for the platform's REST API. It
handles console authentication (bearer tokens), player moderation, storage
inspection and the player-facing authentication flows exercised by the
auth test screen.

The client is designed to be used as an async context manager to ensure
proper resource cleanup:

    async with ConsoleAPIClient(config) as client:
        await client.login("admin", "password")
        status = await client.get_status()

Key Features:
    - Async HTTP requests using httpx
    - Automatic bearer token handling
    - Custom exceptions for error handling
    - Paged player listing collapsed into one in-memory collection
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from kaos_console.config import Config

logger = logging.getLogger(__name__)

# Page size used when walking the paginated player endpoint.
PLAYER_FETCH_PAGE_SIZE = 100

# Upper bound on pages fetched by list_players().
MAX_PLAYER_PAGES = 1000

# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


@dataclass
class APIError(Exception):
    """
    A failed console API call.

    ``status_code`` is 0 when the server could not be reached. ``detail``
    carries the server's ``error``/``detail`` text when it sent one.
    """

    message: str
    status_code: int = 0
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class AuthenticationError(APIError):
    """401/403 from the server, or a protected call made before login."""


# =============================================================================
# SESSION STATE
# =============================================================================


@dataclass
class SessionState:
    """
    Tracks the current console session.

    Attributes:
        token: Bearer token returned by the server after login.
        username: The authenticated username.
        role: The account role (e.g., "admin", "developer", "viewer").
        user_id: The account id reported by the server.

    Properties:
        is_authenticated: True if a token is held.
        is_admin: True if the account has the admin role.
    """

    token: str | None = None
    username: str | None = None
    role: str | None = None
    user_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Check if we have an active session."""
        return self.token is not None

    @property
    def is_admin(self) -> bool:
        """Check if the account has admin privileges."""
        return self.role == "admin"

    def clear(self) -> None:
        """Clear all session state (logout)."""
        self.token = None
        self.username = None
        self.role = None
        self.user_id = None


# =============================================================================
# API CLIENT
# =============================================================================


@dataclass
class ConsoleAPIClient:
    """
    Async HTTP client for the platform console API.

    Attributes:
        config: Configuration object with server URL and timeout settings.
        session: Current authentication session state.

    Example:
        config = Config(server_url="http://localhost:7350", timeout=30.0)

        async with ConsoleAPIClient(config) as client:
            await client.login("admin", "password123")
            players = await client.list_players()
            await client.logout()
    """

    config: Config
    session: SessionState = field(default_factory=SessionState)

    _http_client: httpx.AsyncClient | None = field(default=None, repr=False)

    # -------------------------------------------------------------------------
    # Context Manager Protocol
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> ConsoleAPIClient:
        """Create the underlying httpx.AsyncClient with configured timeout."""
        self._http_client = httpx.AsyncClient(
            base_url=self.config.server_url,
            timeout=self.config.timeout,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Close the underlying HTTP client connection pool."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """
        Get the HTTP client, ensuring it's been initialized.

        Raises:
            RuntimeError: If accessed outside of async context manager.
        """
        if self._http_client is None:
            raise RuntimeError(
                "ConsoleAPIClient must be used as an async context manager. "
                "Use 'async with ConsoleAPIClient(config) as client:'"
            )
        return self._http_client

    # -------------------------------------------------------------------------
    # Request Plumbing
    # -------------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        if self.session.token:
            return {"Authorization": f"Bearer {self.session.token}"}
        return {}

    def _require_auth(self) -> None:
        """
        Verify that we have an active session.

        Raises:
            AuthenticationError: If not currently authenticated.
        """
        if not self.session.is_authenticated:
            raise AuthenticationError(
                message="Not authenticated",
                status_code=401,
                detail="You must be logged in to perform this action",
            )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        action: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Send a request and decode the JSON response.

        Args:
            method: HTTP method.
            path: Path relative to the server URL.
            action: Short description used in error messages ("List players").
            json: Optional JSON body.
            params: Optional query parameters; None values are dropped.

        Returns:
            The decoded JSON body, or an empty dict for an empty 2xx body.

        Raises:
            AuthenticationError: For 401/403 responses.
            APIError: For connection failures, invalid bodies and other errors.
        """
        query = {key: value for key, value in (params or {}).items() if value is not None}
        try:
            response = await self.http_client.request(
                method,
                path,
                json=json,
                params=query or None,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.warning("%s failed: cannot reach %s (%s)", action, self.config.server_url, e)
            raise APIError(
                message=f"{action} failed",
                status_code=0,
                detail=f"Cannot connect to server at {self.config.server_url}: {e}",
            ) from e

        data: Any = {}
        if response.content:
            try:
                data = response.json()
            except ValueError as e:
                # Response is not valid JSON (HTML error page, proxy banner, etc.)
                raise APIError(
                    message=f"{action} failed",
                    status_code=response.status_code,
                    detail=f"Server returned invalid response (status {response.status_code})",
                ) from e

        if response.status_code in (401, 403):
            denied = response.status_code == 403
            raise AuthenticationError(
                message="Permission denied" if denied else "Authentication failed",
                status_code=response.status_code,
                detail=_error_detail(data, "Access denied"),
            )

        if not response.is_success:
            logger.info("%s failed with status %s", action, response.status_code)
            raise APIError(
                message=f"{action} failed",
                status_code=response.status_code,
                detail=_error_detail(data, "Unknown error"),
            )

        return data

    # -------------------------------------------------------------------------
    # Console Authentication
    # -------------------------------------------------------------------------

    async def login(self, username: str, password: str) -> dict[str, Any]:
        """
        Authenticate the console operator.

        Returns:
            dict: The server response containing ``token`` and ``user``.

        Raises:
            AuthenticationError: If credentials are invalid (401).
            APIError: If the server returns any other error.
        """
        data = await self._request(
            "POST",
            "/api/auth/login",
            action="Login",
            json={"username": username, "password": password},
        )

        user = data.get("user") or {}
        self.session.token = data.get("token")
        self.session.username = user.get("username", username)
        self.session.role = user.get("role", "viewer")
        self.session.user_id = str(user["id"]) if user.get("id") is not None else None
        logger.info("Logged in as %s (%s)", self.session.username, self.session.role)
        return dict(data)

    async def logout(self) -> bool:
        """
        End the current session.

        The local state is always cleared, even if the server request fails.

        Returns:
            bool: True if logout was performed, False if not authenticated.
        """
        if not self.session.is_authenticated:
            return False

        try:
            await self._request("POST", "/api/auth/logout", action="Logout")
        except APIError as exc:
            # The server expires tokens on its own; local logout must not fail.
            logger.info("Server-side logout failed: %s", exc)
        finally:
            self.session.clear()

        return True

    async def me(self) -> dict[str, Any]:
        """Return the account behind the current token."""
        self._require_auth()
        return dict(await self._request("GET", "/api/auth/me", action="Load account"))

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    async def get_status(self) -> dict[str, Any]:
        """
        Get server status.

        Returns:
            dict: Status including ``version``, ``uptime_secs``, ``sessions``
            and ``rooms`` counters.
        """
        return dict(await self._request("GET", "/api/status", action="Status check"))

    # -------------------------------------------------------------------------
    # Players
    # -------------------------------------------------------------------------

    async def list_players_page(
        self, page: int = 1, page_size: int = PLAYER_FETCH_PAGE_SIZE
    ) -> dict[str, Any]:
        """
        Fetch one server-side page of players.

        ``total`` is None when the server does not report it.
        """
        self._require_auth()
        data = await self._request(
            "GET",
            "/api/players",
            action="List players",
            params={"page": page, "page_size": page_size},
        )
        total = data.get("total")
        return {
            "items": list(data.get("items", [])),
            "total": None if total is None else int(total),
        }

    async def list_players(self) -> list[dict[str, Any]]:
        """
        Fetch every player as one in-memory collection.

        Walks the paginated endpoint until a short page is returned, or until
        ``total`` records have been read when the server reports a total.
        """
        players: list[dict[str, Any]] = []
        for page in range(1, MAX_PLAYER_PAGES + 1):
            payload = await self.list_players_page(page, PLAYER_FETCH_PAGE_SIZE)
            items = payload["items"]
            players.extend(items)
            if len(items) < PLAYER_FETCH_PAGE_SIZE:
                break
            if payload["total"] is not None and len(players) >= payload["total"]:
                break
        logger.debug("Loaded %d players", len(players))
        return players

    async def ban_player(self, player_id: str, reason: str | None = None) -> dict[str, Any]:
        """Ban a player with an optional reason."""
        self._require_auth()
        return dict(
            await self._request(
                "POST",
                f"/api/players/{player_id}/ban",
                action="Ban player",
                json={"reason": reason or None},
            )
        )

    async def unban_player(self, player_id: str) -> dict[str, Any]:
        """Lift a player's ban."""
        self._require_auth()
        return dict(
            await self._request(
                "POST", f"/api/players/{player_id}/unban", action="Unban player", json={}
            )
        )

    async def delete_player(self, player_id: str) -> None:
        """Permanently delete a player."""
        self._require_auth()
        await self._request("DELETE", f"/api/players/{player_id}", action="Delete player")

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    async def list_collections(self) -> list[str]:
        """Return the names of all storage collections."""
        self._require_auth()
        data = await self._request("GET", "/api/storage/collections", action="List collections")
        return [str(name) for name in data.get("collections", [])]

    async def list_storage_objects(
        self, collection: str, user_id: str | None = None
    ) -> list[dict[str, Any]]:
        """List objects in a collection, optionally for a single owner."""
        self._require_auth()
        data = await self._request(
            "GET",
            "/api/storage/objects",
            action="List storage objects",
            params={"collection": collection, "user_id": user_id or None},
        )
        return list(data.get("objects", []))

    async def create_storage_object(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Write a storage object (collection, key, user_id, value, permissions)."""
        self._require_auth()
        return dict(
            await self._request(
                "POST", "/api/storage/objects", action="Create storage object", json=payload
            )
        )

    async def delete_storage_object(self, collection: str, key: str, user_id: str) -> None:
        """Delete one storage object."""
        self._require_auth()
        await self._request(
            "DELETE",
            f"/api/storage/objects/{collection}/{key}",
            action="Delete storage object",
            params={"user_id": user_id},
        )

    # -------------------------------------------------------------------------
    # Player Authentication Flows (auth test screen)
    # -------------------------------------------------------------------------

    async def authenticate_device(self, device_id: str) -> dict[str, Any]:
        """Authenticate (or register) a player by device id."""
        return dict(
            await self._request(
                "POST",
                "/api/auth/device",
                action="Device authentication",
                json={"device_id": device_id},
            )
        )

    async def authenticate_email(
        self, email: str, password: str, username: str | None = None
    ) -> dict[str, Any]:
        """
        Log in with email/password, or register when a username is given.
        """
        if username:
            path = "/api/auth/email/register"
            body = {"email": email, "password": password, "username": username}
        else:
            path = "/api/auth/email/login"
            body = {"email": email, "password": password}
        return dict(await self._request("POST", path, action="Email authentication", json=body))

    async def authenticate_social(
        self, provider: str, provider_id: str, access_token: str
    ) -> dict[str, Any]:
        """Authenticate a player through a social provider."""
        return dict(
            await self._request(
                "POST",
                "/api/auth/social",
                action="Social authentication",
                json={
                    "provider": provider,
                    "provider_id": provider_id,
                    "access_token": access_token,
                },
            )
        )


def _error_detail(data: Any, default: str) -> str:
    """Extract the server's error text (``error`` or ``detail``)."""
    if isinstance(data, dict):
        detail = data.get("error") or data.get("detail")
        if detail:
            return str(detail)
    return default
