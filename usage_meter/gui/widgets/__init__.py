"""Reusable GUI widgets."""

from usage_meter.gui.widgets.status_bar import StatusBar
from usage_meter.gui.widgets.usage_section import UsageSection

__all__ = ["StatusBar", "UsageSection"]
