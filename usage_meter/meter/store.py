"""Single-slot holder for the most recent usage snapshot."""

from __future__ import annotations

from datetime import datetime

from usage_meter.usage.models import UsageSnapshot


class SnapshotStore:
    """Last-write-wins store.

    Starts empty and is only ever written by the refresh coordinator;
    the renderer and the countdown ticker read from it.
    """

    def __init__(self) -> None:
        self._snapshot: UsageSnapshot | None = None
        self._updated_at: datetime | None = None

    @property
    def current(self) -> UsageSnapshot | None:
        return self._snapshot

    @property
    def updated_at(self) -> datetime | None:
        """Wall-clock time of the last successful replace()."""
        return self._updated_at

    @property
    def is_empty(self) -> bool:
        return self._snapshot is None

    def replace(self, snapshot: UsageSnapshot, updated_at: datetime | None = None) -> None:
        self._snapshot = snapshot
        self._updated_at = updated_at or datetime.now()
