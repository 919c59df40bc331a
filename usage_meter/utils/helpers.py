"""Filesystem and timestamp helpers."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if missing and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """Return the per-user data directory (``~/.usage-meter``)."""
    return Path.home() / ".usage-meter"


_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_iso_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Accepts a trailing ``Z`` and fractions of any length; naive values are
    taken as UTC.
    """
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    # fromisoformat() before 3.11 only takes 3 or 6 fractional digits
    text = _FRACTION_RE.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_iso_timestamp(value: datetime) -> str:
    """Render an aware datetime as RFC 3339 UTC with second precision."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
