"""Load and save the JSON config file."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger

from usage_meter.config.schema import Config
from usage_meter.utils.helpers import ensure_dir, get_data_path


def get_config_path() -> Path:
    """Return the default config file location."""
    return get_data_path() / "config.json"


def load_config(path: Path | None = None) -> Config:
    """Read config from disk, falling back to defaults.

    Environment variables (``USAGE_METER_*``) still apply on top of the
    defaults when the file is missing or broken.
    """
    target = path or get_config_path()
    if not target.exists():
        return Config()

    try:
        payload = json.loads(target.read_text(encoding="utf-8"))
        return Config(**payload)
    except Exception as exc:
        logger.warning("Failed to load config from {}: {}", target, exc)
        return Config()


def save_config(config: Config, path: Path | None = None) -> Path:
    """Write config as pretty JSON and return the path written."""
    target = path or get_config_path()
    ensure_dir(target.parent)
    target.write_text(
        json.dumps(config.model_dump(), indent=2),
        encoding="utf-8",
    )
    return target
