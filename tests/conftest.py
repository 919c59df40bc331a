import asyncio
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from usage_meter.meter.store import SnapshotStore
from usage_meter.usage.models import (
    RateLimitStatus,
    TokenUsage,
    UsageSnapshot,
    UsageWindow,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def make_snapshot(
    five_hour_percent: float = 42.0,
    five_hour_cost: float = 7.8,
    five_hour_budget: float = 18.6,
    api_available: bool = True,
    tier_name: str = "default_claude_max_5x",
    rate_limit_status: RateLimitStatus = RateLimitStatus.NORMAL,
    five_hour_reset: str | None = None,
) -> UsageSnapshot:
    return UsageSnapshot(
        five_hour=UsageWindow(
            percent=five_hour_percent,
            cost_usd=five_hour_cost,
            budget_usd=five_hour_budget,
            reset_ts=five_hour_reset if five_hour_reset is not None else iso(NOW + timedelta(minutes=90)),
            window=TokenUsage(
                input_tokens=1_234,
                output_tokens=56_789,
                cache_read_tokens=2_500_000,
                cache_create_tokens=999,
            ),
        ),
        weekly=UsageWindow(
            percent=75.0,
            cost_usd=160.0,
            budget_usd=218.0,
            reset_ts=iso(NOW + timedelta(hours=40)),
            window=TokenUsage(
                input_tokens=10_000,
                output_tokens=200_000,
                cache_read_tokens=30_000_000,
                cache_create_tokens=400_000,
            ),
        ),
        weekly_sonnet=UsageWindow(
            percent=95.0,
            cost_usd=31.0,
            budget_usd=32.0,
            reset_ts=None,
            window=None,
        ),
        tier_name=tier_name,
        rate_limit_status=rate_limit_status,
        api_available=api_available,
    )


class RecordingSurface:
    """DisplaySurface that remembers the current value of every slot."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.windows = {}
        self.reset_labels: dict[str, str] = {}
        self.tier: str | None = None
        self.status: str | None = None
        self.status_error = False
        self.busy = False
        self.busy_history: list[bool] = []

    def apply_window(self, view) -> None:
        self.calls.append(("apply_window", view))
        self.windows[view.key] = view
        self.reset_labels[view.key] = view.reset_label

    def set_reset_label(self, key: str, text: str) -> None:
        self.calls.append(("set_reset_label", key, text))
        self.reset_labels[key] = text

    def set_tier(self, text: str) -> None:
        self.calls.append(("set_tier", text))
        self.tier = text

    def set_status(self, text: str, error: bool = False) -> None:
        self.calls.append(("set_status", text, error))
        self.status = text
        self.status_error = error

    def set_busy(self, busy: bool) -> None:
        self.calls.append(("set_busy", busy))
        self.busy = busy
        self.busy_history.append(busy)

    def slot_values(self) -> dict:
        return {
            "windows": dict(self.windows),
            "reset_labels": dict(self.reset_labels),
            "tier": self.tier,
        }


class FakeHost:
    def __init__(self, height: int = 300, fail: bool = False) -> None:
        self.height = height
        self.fail = fail
        self.resizes: list[tuple[int, int]] = []
        self.hidden = 0

    async def content_height(self) -> int:
        return self.height

    async def resize_to(self, width: int, height: int) -> None:
        if self.fail:
            raise RuntimeError("window gone")
        self.resizes.append((width, height))

    async def hide(self) -> None:
        self.hidden += 1


class ScriptedProvider:
    """Async provider whose calls block until released.

    Each item in ``results`` is returned (or raised, if an exception) by one
    call, in order; the last item repeats.
    """

    def __init__(self, *results, gated: bool = False) -> None:
        self.results = list(results)
        self.gated = gated
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self._gate = asyncio.Event()

    def release(self) -> None:
        self._gate.set()

    async def __call__(self):
        index = min(self.calls, len(self.results) - 1)
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gated:
                await self._gate.wait()
            else:
                await asyncio.sleep(0)
            result = self.results[index]
        finally:
            self.in_flight -= 1
        if isinstance(result, BaseException):
            raise result
        return result


def fixed_clock(moment: datetime = NOW):
    return lambda: moment


def write_journal(path: Path, entries: list[dict]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [json.dumps(entry) for entry in entries]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def assistant_line(
    timestamp: datetime,
    model: str = "claude-sonnet-4-20250514",
    input_tokens: int = 1000,
    output_tokens: int = 1000,
    cache_read: int = 0,
    cache_create: int = 0,
) -> dict:
    return {
        "type": "assistant",
        "timestamp": timestamp.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
        "message": {
            "model": model,
            "usage": {
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
                "cache_read_input_tokens": cache_read,
                "cache_creation_input_tokens": cache_create,
            },
        },
    }


@pytest.fixture
def snapshot():
    return make_snapshot()


@pytest.fixture
def store():
    return SnapshotStore()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def host():
    return FakeHost()
