"""
Configurable grid navigation keys.

The list screens (players, storage objects) dispatch a handful of grid
actions from plain keys. Operators can rebind them in a JSON file:

    {"next_page": ["n", "right_square_bracket"], "select": "enter"}

or the same mapping wrapped as ``{"bindings": {...}}``. Keys use Textual's
key names (``slash``, ``space``, ``right_square_bracket``). A missing or
unreadable file leaves the defaults in place; the console never refuses to
start over a keybindings problem.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

ENV_KEYBINDINGS_PATH = "KAOS_CONSOLE_KEYBINDINGS_PATH"
DEFAULT_KEYBINDINGS_PATH = Path.home() / ".config" / "kaos-console" / "keybindings.json"

# Actions a DataGrid host screen knows how to perform.
GRID_ACTIONS = ("next_page", "prev_page", "focus_search", "cursor_up", "cursor_down", "select")

DEFAULT_KEYBINDINGS: dict[str, list[str]] = {
    "cursor_up": ["k"],
    "cursor_down": ["j"],
    "next_page": ["right_square_bracket"],
    "prev_page": ["left_square_bracket"],
    "focus_search": ["slash"],
    "select": ["space"],
}


@dataclass(frozen=True)
class KeyBindings:
    """
    Action to key-list mapping used by the grid screens.

    Attributes:
        bindings: Action name -> keys in Textual key syntax.
    """

    bindings: dict[str, list[str]]

    @classmethod
    def load(cls, path: Path | None = None) -> KeyBindings:
        """
        Build the bindings from defaults plus the user's file, if any.

        The file is looked up at ``path``, then ``$KAOS_CONSOLE_KEYBINDINGS_PATH``,
        then ``~/.config/kaos-console/keybindings.json``. Each action named in
        the file replaces that action's whole key list.
        """
        source = path if path is not None else _default_path()
        bindings = {action: list(keys) for action, keys in DEFAULT_KEYBINDINGS.items()}

        if source.exists():
            try:
                bindings.update(_read_overrides(source))
            except (OSError, ValueError) as exc:
                logger.warning("Failed to load keybindings from %s: %s", source, exc)
            else:
                logger.info("Loaded keybindings from %s", source)

        _warn_on_conflicts(bindings)
        return cls(bindings=bindings)

    def get_keys(self, action: str) -> list[str]:
        return list(self.bindings.get(action, []))

    def actions_by_key(self, actions: tuple[str, ...] = GRID_ACTIONS) -> dict[str, str]:
        """Map each key to the first of ``actions`` that claims it."""
        mapping: dict[str, str] = {}
        for action in actions:
            for key in self.get_keys(action):
                mapping.setdefault(key, action)
        return mapping


def _default_path() -> Path:
    env_path = os.environ.get(ENV_KEYBINDINGS_PATH)
    return Path(env_path) if env_path else DEFAULT_KEYBINDINGS_PATH


def _read_overrides(path: Path) -> dict[str, list[str]]:
    """Parse the JSON file; entries with no usable keys are skipped."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict) and "bindings" in payload:
        payload = payload["bindings"]
    if not isinstance(payload, dict):
        raise ValueError("Keybindings JSON must be a mapping")

    overrides: dict[str, list[str]] = {}
    for action, raw_keys in payload.items():
        keys = _clean_keys(raw_keys)
        if not keys:
            logger.debug("Ignoring keybinding %r: no valid keys", action)
            continue
        if action not in GRID_ACTIONS:
            logger.debug("Ignoring keybinding for unknown action %r", action)
            continue
        overrides[action] = keys
    return overrides


def _clean_keys(raw: Any) -> list[str]:
    """Accept one key or a list of keys; lowercase, trimmed, non-empty."""
    candidates = [raw] if isinstance(raw, str) else raw
    if not isinstance(candidates, list):
        return []
    return [key.strip().lower() for key in candidates if isinstance(key, str) and key.strip()]


def _warn_on_conflicts(bindings: dict[str, list[str]]) -> None:
    owners: dict[str, str] = {}
    for action in GRID_ACTIONS:
        for key in bindings.get(action, []):
            if key in owners:
                logger.warning(
                    "Key %r is bound to both %s and %s; keeping %s",
                    key,
                    owners[key],
                    action,
                    owners[key],
                )
            else:
                owners[key] = action
