"""
Record sources for the console screens.

Screens never decide for themselves whether they show live or sample data.
The application injects one ``ConsoleDataSource`` at construction time:

- ``ApiDataSource`` delegates to the platform REST API.
- ``SampleDataSource`` serves an in-memory copy of a YAML fixture and applies
  mutations to that copy, so the whole console can be exercised offline.

Both return plain dicts shaped like the API payloads.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any, Protocol

import yaml

from kaos_console.api.client import APIError, ConsoleAPIClient

logger = logging.getLogger(__name__)

SAMPLE_DATA_RESOURCE = "sample_data.yaml"


class ConsoleDataSource(Protocol):
    """Operations the player and storage screens need from a backend."""

    async def list_players(self) -> list[dict[str, Any]]: ...

    async def ban_player(self, player_id: str, reason: str | None = None) -> None: ...

    async def unban_player(self, player_id: str) -> None: ...

    async def delete_player(self, player_id: str) -> None: ...

    async def list_collections(self) -> list[str]: ...

    async def list_storage_objects(
        self, collection: str, user_id: str | None = None
    ) -> list[dict[str, Any]]: ...

    async def create_storage_object(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    async def delete_storage_object(self, collection: str, key: str, user_id: str) -> None: ...


class ApiDataSource:
    """Data source backed by the live platform API."""

    def __init__(self, client: ConsoleAPIClient) -> None:
        self._client = client

    async def list_players(self) -> list[dict[str, Any]]:
        return await self._client.list_players()

    async def ban_player(self, player_id: str, reason: str | None = None) -> None:
        await self._client.ban_player(player_id, reason)

    async def unban_player(self, player_id: str) -> None:
        await self._client.unban_player(player_id)

    async def delete_player(self, player_id: str) -> None:
        await self._client.delete_player(player_id)

    async def list_collections(self) -> list[str]:
        return await self._client.list_collections()

    async def list_storage_objects(
        self, collection: str, user_id: str | None = None
    ) -> list[dict[str, Any]]:
        return await self._client.list_storage_objects(collection, user_id)

    async def create_storage_object(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._client.create_storage_object(payload)

    async def delete_storage_object(self, collection: str, key: str, user_id: str) -> None:
        await self._client.delete_storage_object(collection, key, user_id)


class SampleDataSource:
    """
    In-memory data source seeded from a fixture.

    Args:
        data: Mapping with ``players`` and ``storage_objects`` lists. The
              mapping is deep-copied so mutations never leak into the caller.
    """

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._players: list[dict[str, Any]] = copy.deepcopy(list(data.get("players") or []))
        self._objects: list[dict[str, Any]] = copy.deepcopy(
            list(data.get("storage_objects") or [])
        )
        self._version = 0

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> SampleDataSource:
        """
        Load a fixture file; defaults to the bundled sample data.

        Raises:
            ValueError: If the file does not contain a mapping.
        """
        if path is None:
            text = resources.files("kaos_console.data").joinpath(SAMPLE_DATA_RESOURCE).read_text(
                encoding="utf-8"
            )
        else:
            text = path.read_text(encoding="utf-8")

        raw = yaml.safe_load(text) or {}
        if not isinstance(raw, dict):
            raise ValueError("Sample data must be a mapping")
        logger.info(
            "Loaded sample data: %d players, %d storage objects",
            len(raw.get("players") or []),
            len(raw.get("storage_objects") or []),
        )
        return cls(raw)

    # -------------------------------------------------------------------------
    # Players
    # -------------------------------------------------------------------------

    async def list_players(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._players)

    async def ban_player(self, player_id: str, reason: str | None = None) -> None:
        player = self._find_player(player_id)
        player["banned"] = True
        player["ban_reason"] = reason or None

    async def unban_player(self, player_id: str) -> None:
        player = self._find_player(player_id)
        player["banned"] = False
        player["ban_reason"] = None

    async def delete_player(self, player_id: str) -> None:
        player = self._find_player(player_id)
        self._players.remove(player)

    def _find_player(self, player_id: str) -> dict[str, Any]:
        for player in self._players:
            if str(player.get("id")) == str(player_id):
                return player
        raise APIError(message="Player not found", status_code=404, detail=str(player_id))

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    async def list_collections(self) -> list[str]:
        return sorted({str(obj.get("collection", "")) for obj in self._objects} - {""})

    async def list_storage_objects(
        self, collection: str, user_id: str | None = None
    ) -> list[dict[str, Any]]:
        return [
            copy.deepcopy(obj)
            for obj in self._objects
            if obj.get("collection") == collection
            and (not user_id or str(obj.get("user_id")) == user_id)
        ]

    async def create_storage_object(self, payload: dict[str, Any]) -> dict[str, Any]:
        for field_name in ("collection", "key", "user_id"):
            if not payload.get(field_name):
                raise APIError(
                    message="Create storage object failed",
                    status_code=400,
                    detail=f"{field_name} is required",
                )

        self._version += 1
        record = dict(payload)
        record["version"] = f"v{self._version}"
        existing = self._find_object(payload["collection"], payload["key"], payload["user_id"])
        if existing is not None:
            record.setdefault("created_at", existing.get("created_at"))
            self._objects[self._objects.index(existing)] = record
        else:
            self._objects.append(record)
        return copy.deepcopy(record)

    async def delete_storage_object(self, collection: str, key: str, user_id: str) -> None:
        existing = self._find_object(collection, key, user_id)
        if existing is None:
            raise APIError(
                message="Storage object not found",
                status_code=404,
                detail=f"{collection}/{key}",
            )
        self._objects.remove(existing)

    def _find_object(self, collection: str, key: str, user_id: str) -> dict[str, Any] | None:
        return next(
            (
                obj
                for obj in self._objects
                if obj.get("collection") == collection
                and obj.get("key") == key
                and str(obj.get("user_id")) == str(user_id)
            ),
            None,
        )
