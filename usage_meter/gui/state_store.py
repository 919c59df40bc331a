"""Persistence helpers for the widget's screen position."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from usage_meter.utils.helpers import ensure_dir, get_data_path


@dataclass(frozen=True)
class WindowPosition:
    """Stored top-left corner. Size is always derived from content."""

    x: int
    y: int


def default_state_path() -> Path:
    """Return default path for persisted GUI state."""
    return get_data_path() / "gui_state.json"


def load_window_position(path: Path | None = None) -> WindowPosition | None:
    """Load the persisted position, or None when absent or unreadable."""
    target = path or default_state_path()
    if not target.exists():
        return None

    try:
        payload = json.loads(target.read_text(encoding="utf-8"))
        return WindowPosition(x=int(payload["x"]), y=int(payload["y"]))
    except Exception as exc:
        logger.debug(f"[gui] Ignoring unreadable window state {target}: {exc}")
        return None


def save_window_position(position: WindowPosition, path: Path | None = None) -> None:
    """Persist the window position to disk."""
    target = path or default_state_path()
    ensure_dir(target.parent)
    payload = {"x": position.x, "y": position.y}
    target.write_text(json.dumps(payload, indent=2), encoding="utf-8")
