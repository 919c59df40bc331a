"""Usage provider: builds a UsageSnapshot from local journals and the usage API.

Usage:
    service = UsageService.from_config(load_config())
    snapshot = await service.fetch()
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from loguru import logger

from usage_meter.config.schema import BudgetOverrides, Config
from usage_meter.usage.api_client import ApiWindow, UsageAPIError, fetch_api_usage
from usage_meter.usage.budgets import Budgets, resolve_budgets
from usage_meter.usage.credentials import read_credentials
from usage_meter.usage.journal import (
    FIVE_HOURS,
    SEVEN_DAYS,
    WindowAggregate,
    aggregate_entries,
    compute_reset_ts,
    load_entries,
)
from usage_meter.usage.models import (
    RateLimitStatus,
    UsageProviderError,
    UsageSnapshot,
    UsageWindow,
)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def estimate_percent(cost_usd: float, budget_usd: float) -> float:
    """Cost as a share of budget, clamped to 0..100 and rounded to 0.1."""
    if budget_usd <= 0:
        return 100.0 if cost_usd > 0 else 0.0
    pct = min(max(cost_usd / budget_usd * 100.0, 0.0), 100.0)
    return round(pct, 1)


def _window(
    agg: WindowAggregate,
    budget_usd: float,
    length: timedelta,
    with_tokens: bool = True,
) -> UsageWindow:
    return UsageWindow(
        percent=estimate_percent(agg.cost_usd, budget_usd),
        cost_usd=agg.cost_usd,
        budget_usd=budget_usd,
        reset_ts=compute_reset_ts(agg.oldest, length),
        window=agg.tokens if with_tokens else None,
    )


def _apply_api(window: UsageWindow, api: ApiWindow | None) -> UsageWindow:
    if api is None:
        return window
    if api.utilization is not None:
        window = replace(window, percent=api.utilization)
    if api.resets_at is not None:
        window = replace(window, reset_ts=api.resets_at)
    return window


class UsageService:
    """Zero-argument usage provider backed by ``~/.claude``."""

    def __init__(
        self,
        claude_dir: Path,
        budget_overrides: BudgetOverrides | None = None,
        use_api: bool = True,
        api_timeout_s: float = 5.0,
        clock: Clock | None = None,
    ) -> None:
        self.claude_dir = claude_dir
        self.budget_overrides = budget_overrides
        self.use_api = use_api
        self.api_timeout_s = api_timeout_s
        self._clock = clock or _utc_now

    @classmethod
    def from_config(cls, config: Config) -> "UsageService":
        return cls(
            claude_dir=config.claude_path,
            budget_overrides=config.budgets,
            use_api=config.refresh.use_api,
            api_timeout_s=config.refresh.api_timeout_s,
        )

    @property
    def projects_dir(self) -> Path:
        return self.claude_dir / "projects"

    async def fetch(self) -> UsageSnapshot:
        """Build a snapshot off the event loop thread."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.get_usage)

    __call__ = fetch

    def get_usage(self) -> UsageSnapshot:
        """Blocking snapshot build; raises UsageProviderError when nothing is readable."""
        creds = read_credentials(self.claude_dir)
        budgets = resolve_budgets(creds.tier, self.budget_overrides)
        snapshot = self._estimate(creds.tier, budgets)

        if not self.use_api or not creds.access_token:
            return snapshot

        try:
            api_windows = fetch_api_usage(creds.access_token, timeout_s=self.api_timeout_s)
        except UsageAPIError as exc:
            logger.debug(f"[usage] Usage API unavailable, showing estimates: {exc}")
            if exc.rate_limited:
                return replace(snapshot, rate_limit_status=RateLimitStatus.RATE_LIMITED)
            return snapshot

        return replace(
            snapshot,
            five_hour=_apply_api(snapshot.five_hour, api_windows.get("five_hour")),
            weekly=_apply_api(snapshot.weekly, api_windows.get("weekly")),
            weekly_sonnet=_apply_api(snapshot.weekly_sonnet, api_windows.get("weekly_sonnet")),
            api_available=True,
        )

    def _estimate(self, tier: str, budgets: Budgets) -> UsageSnapshot:
        projects = self.projects_dir
        if not projects.is_dir():
            raise UsageProviderError(f"Claude projects directory not found: {projects}")

        now = self._clock()
        week_ago = now - SEVEN_DAYS
        entries = load_entries(projects, week_ago)
        sonnet_entries = [e for e in entries if "sonnet" in e.model.lower()]

        five_hour = aggregate_entries(entries, now - FIVE_HOURS)
        weekly = aggregate_entries(entries, week_ago)
        weekly_sonnet = aggregate_entries(sonnet_entries, week_ago)

        return UsageSnapshot(
            five_hour=_window(five_hour, budgets.five_hour, FIVE_HOURS),
            weekly=_window(weekly, budgets.weekly, SEVEN_DAYS),
            weekly_sonnet=_window(weekly_sonnet, budgets.weekly_sonnet, SEVEN_DAYS, with_tokens=False),
            tier_name=tier,
            rate_limit_status=RateLimitStatus.NORMAL,
            api_available=False,
        )
