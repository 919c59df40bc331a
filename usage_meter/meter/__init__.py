"""Refresh-state and rendering core of the usage meter."""

from usage_meter.meter.coordinator import RefreshCoordinator, RefreshState, RefreshTrigger
from usage_meter.meter.renderer import Renderer
from usage_meter.meter.store import SnapshotStore
from usage_meter.meter.surface import DisplaySurface, HostWindow, MeterView, WindowView
from usage_meter.meter.ticker import CountdownTicker

__all__ = [
    "CountdownTicker",
    "DisplaySurface",
    "HostWindow",
    "MeterView",
    "RefreshCoordinator",
    "RefreshState",
    "RefreshTrigger",
    "Renderer",
    "SnapshotStore",
    "WindowView",
]
