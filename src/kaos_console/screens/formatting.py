"""Formatting helpers shared across console screens."""

from __future__ import annotations

import json
import time
from datetime import datetime
from typing import Any

# Epoch values above this are treated as milliseconds.
_MILLISECOND_THRESHOLD = 10_000_000_000

PERMISSION_LABELS = {
    0: "No Access",
    1: "Owner Only",
    2: "Public",
}


def _to_epoch_seconds(value: Any) -> float | None:
    """Normalize epoch seconds/milliseconds or ISO strings to epoch seconds."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number / 1000 if number > _MILLISECOND_THRESHOLD else number
    text = str(value)
    # fromisoformat only accepts a "Z" suffix from Python 3.11.
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).timestamp()
    except ValueError:
        return None


def format_timestamp(value: Any) -> str:
    """Format a timestamp for display."""
    if value is None or value == "":
        return "-"
    seconds = _to_epoch_seconds(value)
    if seconds is None:
        text = str(value)
        return text.split(".")[0] if "." in text else text
    return datetime.fromtimestamp(seconds).strftime("%Y-%m-%d %H:%M:%S")


def format_relative_time(value: Any, now: float | None = None) -> str:
    """Format a timestamp as a coarse age ("5m ago")."""
    seconds = _to_epoch_seconds(value)
    if seconds is None:
        return "-"
    current = time.time() if now is None else now
    delta = int(current - seconds)
    if delta < 60:
        return "just now"
    if delta < 3600:
        return f"{delta // 60}m ago"
    if delta < 86400:
        return f"{delta // 3600}h ago"
    return f"{delta // 86400}d ago"


def format_uptime(seconds: int | float | str | None) -> str:
    """Format server uptime as days/hours or hours/minutes."""
    if seconds is None:
        return "-"
    try:
        total = int(seconds)
    except (TypeError, ValueError):
        return "-"

    days, remainder = divmod(total, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60
    if days > 0:
        return f"{days}d {hours}h"
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def truncate(text: str, max_length: int) -> str:
    """Truncate text to a maximum length."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def permission_label(permission: Any) -> str:
    """Label a numeric storage permission."""
    try:
        code = int(permission)
    except (TypeError, ValueError):
        return f"Unknown ({permission})"
    return PERMISSION_LABELS.get(code, f"Unknown ({code})")


def format_permissions(record: dict[str, Any]) -> str:
    """
    Describe a storage object's permissions.

    Storage objects arrive in two shapes: a single ``permission`` string, or
    separate numeric ``permission_read``/``permission_write`` fields. Both
    are shown as received; neither is converted into the other.
    """
    if record.get("permission") not in (None, ""):
        return str(record["permission"])
    if "permission_read" in record or "permission_write" in record:
        read = permission_label(record.get("permission_read"))
        write = permission_label(record.get("permission_write"))
        return f"R: {read} / W: {write}"
    return "-"


def format_json(value: Any) -> str:
    """Pretty-print a JSON-compatible value."""
    try:
        return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)
