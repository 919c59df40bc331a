"""Map usage snapshots to view-state and push it to a display surface."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from usage_meter.meter.formatting import (
    clamp_bar,
    format_budget,
    format_cost,
    format_percent,
    format_reset_time,
    format_tier,
    format_tokens,
    threshold_class,
)
from usage_meter.meter.store import SnapshotStore
from usage_meter.meter.surface import DisplaySurface, MeterView, TokenLabel, WindowView
from usage_meter.usage.models import WINDOW_KEYS, TokenUsage, UsageSnapshot, UsageWindow

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def token_labels(tokens: TokenUsage) -> tuple[TokenLabel, ...]:
    return (
        TokenLabel("In", format_tokens(tokens.input_tokens)),
        TokenLabel("Out", format_tokens(tokens.output_tokens)),
        TokenLabel("Cache R", format_tokens(tokens.cache_read_tokens)),
        TokenLabel("Cache W", format_tokens(tokens.cache_create_tokens)),
    )


def build_window_view(key: str, info: UsageWindow, estimated: bool, now: datetime) -> WindowView:
    return WindowView(
        key=key,
        bar_percent=clamp_bar(info.percent),
        percent_label=format_percent(info.percent, over_budget=info.over_budget, estimated=estimated),
        cost_label=format_cost(info.cost_usd),
        budget_label=format_budget(info.budget_usd),
        reset_label=format_reset_time(info.reset_ts, now),
        band=threshold_class(info.percent),
        tokens=token_labels(info.window) if info.window is not None else None,
    )


def build_view(snapshot: UsageSnapshot, now: datetime) -> MeterView:
    estimated = snapshot.estimated
    return MeterView(
        windows=tuple(
            build_window_view(key, snapshot.window(key), estimated, now)
            for key in WINDOW_KEYS
        ),
        tier_label=format_tier(snapshot.tier_name, snapshot.rate_limit_status),
    )


class Renderer:
    """Writes snapshot view-state to a DisplaySurface.

    ``render()`` is idempotent for a given snapshot and clock reading.
    ``render_reset_times()`` is the cheap path used between refreshes: it
    only rewrites the three countdown labels.
    """

    def __init__(
        self,
        surface: DisplaySurface,
        store: SnapshotStore,
        clock: Clock | None = None,
    ) -> None:
        self.surface = surface
        self.store = store
        self._clock = clock or _utc_now

    def render(self, snapshot: UsageSnapshot) -> MeterView:
        view = build_view(snapshot, self._clock())
        for window_view in view.windows:
            self.surface.apply_window(window_view)
        self.surface.set_tier(view.tier_label)
        return view

    def render_reset_times(self) -> dict[str, str] | None:
        """Refresh countdown labels from the stored snapshot; None when empty."""
        snapshot = self.store.current
        if snapshot is None:
            return None
        now = self._clock()
        labels = {
            key: format_reset_time(snapshot.window(key).reset_ts, now)
            for key in WINDOW_KEYS
        }
        for key, text in labels.items():
            self.surface.set_reset_label(key, text)
        return labels
