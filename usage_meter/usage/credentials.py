"""Read the Claude Code OAuth credentials file."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

CREDENTIALS_FILE = ".credentials.json"
UNKNOWN_TIER = "unknown"


@dataclass(frozen=True)
class ClaudeCredentials:
    tier: str = UNKNOWN_TIER
    access_token: str | None = None


def read_credentials(claude_dir: Path) -> ClaudeCredentials:
    """Return tier and access token; missing or broken files give defaults."""
    target = claude_dir / CREDENTIALS_FILE
    if not target.exists():
        return ClaudeCredentials()

    try:
        payload = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.debug(f"[usage] Could not read {target}: {exc}")
        return ClaudeCredentials()

    oauth = payload.get("claudeAiOauth") if isinstance(payload, dict) else None
    if not isinstance(oauth, dict):
        return ClaudeCredentials()

    return ClaudeCredentials(
        tier=oauth.get("rateLimitTier") or UNKNOWN_TIER,
        access_token=oauth.get("accessToken") or None,
    )
