"""View-state types and the interfaces the meter core writes to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from usage_meter.usage.models import FIVE_HOUR, WEEKLY, WEEKLY_SONNET

WINDOW_TITLES: dict[str, str] = {
    FIVE_HOUR: "5-Hour Window",
    WEEKLY: "Weekly",
    WEEKLY_SONNET: "Weekly Sonnet",
}


@dataclass(frozen=True)
class TokenLabel:
    label: str   # "In" | "Out" | "Cache R" | "Cache W"
    value: str

    def __str__(self) -> str:
        return f"{self.label}: {self.value}"


@dataclass(frozen=True)
class WindowView:
    """Everything shown for one budget window."""

    key: str
    bar_percent: float          # clamped to 0..100, width only
    percent_label: str
    cost_label: str
    budget_label: str
    reset_label: str
    band: str                   # "" | "warn" | "danger"
    tokens: tuple[TokenLabel, ...] | None = None

    @property
    def title(self) -> str:
        return WINDOW_TITLES.get(self.key, self.key)

    @property
    def bar_fraction(self) -> float:
        return self.bar_percent / 100.0

    @property
    def cost_text(self) -> str:
        return f"{self.cost_label} / {self.budget_label}"

    @property
    def tokens_text(self) -> str:
        if not self.tokens:
            return ""
        return "   ".join(str(t) for t in self.tokens)


@dataclass(frozen=True)
class MeterView:
    windows: tuple[WindowView, ...]
    tier_label: str

    def window(self, key: str) -> WindowView:
        for view in self.windows:
            if view.key == key:
                return view
        raise KeyError(key)


class DisplaySurface(Protocol):
    """Named display slots; styling is the implementation's business."""

    def apply_window(self, view: WindowView) -> None: ...

    def set_reset_label(self, key: str, text: str) -> None: ...

    def set_tier(self, text: str) -> None: ...

    def set_status(self, text: str, error: bool = False) -> None: ...

    def set_busy(self, busy: bool) -> None: ...


class HostWindow(Protocol):
    """Window controls offered by the desktop shell."""

    async def content_height(self) -> int: ...

    async def resize_to(self, width: int, height: int) -> None: ...

    async def hide(self) -> None: ...
