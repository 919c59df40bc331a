"""Usage snapshot models shared by the provider and the meter core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

FIVE_HOUR = "five_hour"
WEEKLY = "weekly"
WEEKLY_SONNET = "weekly_sonnet"

# Display order of the three budget windows.
WINDOW_KEYS: tuple[str, ...] = (FIVE_HOUR, WEEKLY, WEEKLY_SONNET)


class UsageProviderError(RuntimeError):
    """Raised when usage data cannot be produced at all."""


class RateLimitStatus(str, Enum):
    NORMAL = "normal"
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True)
class TokenUsage:
    """Token counts for one window, split by category."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_create_tokens: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "cache_read_tokens": self.cache_read_tokens,
            "cache_create_tokens": self.cache_create_tokens,
        }


@dataclass(frozen=True)
class UsageWindow:
    """Consumption against one budget window.

    ``percent`` is not clamped: it can go past 100 when the window is over
    budget. ``reset_ts`` is None when no window is active, which is not the
    same as a reset time in the past.
    """

    percent: float = 0.0
    cost_usd: float = 0.0
    budget_usd: float = 0.0
    reset_ts: str | None = None
    window: TokenUsage | None = None

    @property
    def over_budget(self) -> bool:
        return self.cost_usd > self.budget_usd

    def to_dict(self) -> dict[str, Any]:
        return {
            "percent": self.percent,
            "cost_usd": self.cost_usd,
            "budget_usd": self.budget_usd,
            "reset_ts": self.reset_ts,
            "window": self.window.to_dict() if self.window is not None else None,
        }


@dataclass(frozen=True)
class UsageSnapshot:
    """One complete set of usage figures for all three windows."""

    five_hour: UsageWindow
    weekly: UsageWindow
    weekly_sonnet: UsageWindow
    tier_name: str = "unknown"
    rate_limit_status: RateLimitStatus = RateLimitStatus.NORMAL
    api_available: bool = False

    @property
    def estimated(self) -> bool:
        """True when the figures are not confirmed by the usage API."""
        return not self.api_available

    @property
    def rate_limited(self) -> bool:
        return self.rate_limit_status is RateLimitStatus.RATE_LIMITED

    def window(self, key: str) -> UsageWindow:
        if key not in WINDOW_KEYS:
            raise KeyError(key)
        return getattr(self, key)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form, as printed by ``usage-meter show --json``."""
        return {
            "tier_name": self.tier_name,
            "rate_limit_status": self.rate_limit_status.value,
            "api_available": self.api_available,
            FIVE_HOUR: self.five_hour.to_dict(),
            WEEKLY: self.weekly.to_dict(),
            WEEKLY_SONNET: self.weekly_sonnet.to_dict(),
        }
