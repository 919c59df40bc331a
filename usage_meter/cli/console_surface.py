"""Display surface that collects view-state for terminal output."""

from __future__ import annotations

from rich.table import Table

from usage_meter.meter.surface import WINDOW_TITLES, WindowView
from usage_meter.usage.models import WINDOW_KEYS

_BAND_STYLES = {"": "green", "warn": "yellow", "danger": "red"}


class ConsoleSurface:
    """Keeps the latest value of every slot so it can be printed once."""

    def __init__(self) -> None:
        self.windows: dict[str, WindowView] = {}
        self.reset_labels: dict[str, str] = {}
        self.tier = ""
        self.status = ""
        self.error = False
        self.busy = False

    def apply_window(self, view: WindowView) -> None:
        self.windows[view.key] = view
        self.reset_labels[view.key] = view.reset_label

    def set_reset_label(self, key: str, text: str) -> None:
        self.reset_labels[key] = text

    def set_tier(self, text: str) -> None:
        self.tier = text

    def set_status(self, text: str, error: bool = False) -> None:
        self.status = text
        self.error = error

    def set_busy(self, busy: bool) -> None:
        self.busy = busy

    def to_table(self) -> Table:
        table = Table(title="Claude Usage", show_lines=False)
        table.add_column("Window")
        table.add_column("Used", justify="right")
        table.add_column("Cost / Budget", justify="right")
        table.add_column("Reset")
        table.add_column("Tokens")
        for key in WINDOW_KEYS:
            view = self.windows.get(key)
            if view is None:
                continue
            style = _BAND_STYLES.get(view.band, "")
            table.add_row(
                WINDOW_TITLES[key],
                f"[{style}]{view.percent_label}[/{style}]",
                view.cost_text,
                self.reset_labels.get(key, view.reset_label),
                view.tokens_text,
            )
        return table
