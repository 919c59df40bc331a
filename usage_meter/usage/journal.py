"""Aggregate token usage from Claude Code session journals.

Claude Code writes one JSONL file per session under
``~/.claude/projects/<project>/``. Every ``assistant`` line carries the
model name, a timestamp and a ``message.usage`` block:

    {"type": "assistant", "timestamp": "2025-06-01T10:00:00.123Z",
     "message": {"model": "claude-sonnet-4-...",
                 "usage": {"input_tokens": 12, "output_tokens": 340,
                           "cache_read_input_tokens": 5000,
                           "cache_creation_input_tokens": 800}}}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from loguru import logger

from usage_meter.usage.models import TokenUsage
from usage_meter.usage.pricing import calculate_cost
from usage_meter.utils.helpers import format_iso_timestamp, parse_iso_timestamp

FIVE_HOURS = timedelta(hours=5)
SEVEN_DAYS = timedelta(days=7)


@dataclass(frozen=True)
class UsageEntry:
    """One assistant turn."""

    model: str
    timestamp: datetime
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_create_tokens: int = 0

    @property
    def cost_usd(self) -> float:
        return calculate_cost(
            self.model,
            self.input_tokens,
            self.output_tokens,
            self.cache_read_tokens,
            self.cache_create_tokens,
        )


@dataclass
class WindowAggregate:
    """Totals over every entry inside one window."""

    tokens: TokenUsage = field(default_factory=TokenUsage)
    cost_usd: float = 0.0
    oldest: datetime | None = None


def _count(usage: dict, key: str) -> int:
    value = usage.get(key) or 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def scan_journal_files(projects_dir: Path, since: datetime) -> list[Path]:
    """List ``*.jsonl`` files one level below each project dir, modified after ``since``."""
    files: list[Path] = []
    if not projects_dir.is_dir():
        return files

    cutoff = since.timestamp()
    for project in projects_dir.iterdir():
        if not project.is_dir():
            continue
        try:
            candidates = list(project.glob("*.jsonl"))
        except OSError:
            continue
        for path in candidates:
            try:
                if path.stat().st_mtime < cutoff:
                    continue
            except OSError:
                continue
            files.append(path)
    return files


def parse_journal_line(line: str) -> UsageEntry | None:
    """Return the usage entry carried by ``line``, or None for anything else."""
    line = line.strip()
    if not line or '"assistant"' not in line:
        return None
    try:
        data = json.loads(line)
    except ValueError:
        return None
    if not isinstance(data, dict) or data.get("type") != "assistant":
        return None

    message = data.get("message")
    ts_raw = data.get("timestamp")
    if not isinstance(message, dict) or not isinstance(ts_raw, str) or not ts_raw:
        return None
    usage = message.get("usage")
    if not isinstance(usage, dict):
        return None
    try:
        timestamp = parse_iso_timestamp(ts_raw)
    except ValueError:
        return None

    return UsageEntry(
        model=message.get("model") or "unknown",
        timestamp=timestamp,
        input_tokens=_count(usage, "input_tokens"),
        output_tokens=_count(usage, "output_tokens"),
        cache_read_tokens=_count(usage, "cache_read_input_tokens"),
        cache_create_tokens=_count(usage, "cache_creation_input_tokens"),
    )


def parse_journal_file(path: Path, since: datetime) -> list[UsageEntry]:
    entries: list[UsageEntry] = []
    try:
        with path.open(encoding="utf-8", errors="replace") as handle:
            for line in handle:
                entry = parse_journal_line(line)
                if entry is None or entry.timestamp < since:
                    continue
                entries.append(entry)
    except OSError as exc:
        logger.debug(f"[usage] Skipping unreadable journal {path}: {exc}")
    return entries


def load_entries(projects_dir: Path, since: datetime) -> list[UsageEntry]:
    entries: list[UsageEntry] = []
    files = scan_journal_files(projects_dir, since)
    for path in files:
        entries.extend(parse_journal_file(path, since))
    logger.debug(f"[usage] Parsed {len(entries)} entries from {len(files)} journals")
    return entries


def aggregate_entries(entries: list[UsageEntry], since: datetime) -> WindowAggregate:
    """Sum tokens and cost over the entries at or after ``since``."""
    agg = WindowAggregate()
    input_tokens = output_tokens = cache_read = cache_create = 0
    total_cost = 0.0

    for entry in entries:
        if entry.timestamp < since:
            continue
        if agg.oldest is None or entry.timestamp < agg.oldest:
            agg.oldest = entry.timestamp

        input_tokens += entry.input_tokens
        output_tokens += entry.output_tokens
        cache_read += entry.cache_read_tokens
        cache_create += entry.cache_create_tokens
        total_cost += entry.cost_usd

    agg.tokens = TokenUsage(
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cache_read_tokens=cache_read,
        cache_create_tokens=cache_create,
    )
    agg.cost_usd = round(total_cost, 3)
    return agg


def compute_reset_ts(oldest: datetime | None, window: timedelta) -> str | None:
    """A rolling window resets ``window`` after its oldest entry."""
    if oldest is None:
        return None
    return format_iso_timestamp(oldest + window)
