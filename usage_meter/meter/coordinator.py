"""Refresh lifecycle: fetch, store, render, resize.

Usage:
    coordinator = RefreshCoordinator(service.fetch, store, renderer, surface, host)
    hub.subscribe(USAGE_UPDATED, lambda _: coordinator.request_refresh(RefreshTrigger.PUSHED))
    await coordinator.refresh(RefreshTrigger.STARTUP)
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable

from loguru import logger

from usage_meter.meter.layout import DEFAULT_WIDTH, fit_to_content
from usage_meter.meter.renderer import Renderer
from usage_meter.meter.store import SnapshotStore
from usage_meter.meter.surface import DisplaySurface, HostWindow
from usage_meter.usage.models import UsageProviderError, UsageSnapshot

UsageProvider = Callable[[], Awaitable[UsageSnapshot]]
WallClock = Callable[[], datetime]


class RefreshState(str, Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"
    ERROR = "error"


class RefreshTrigger(str, Enum):
    STARTUP = "startup"
    MANUAL = "manual"
    PUSHED = "pushed"


def format_updated(moment: datetime) -> str:
    return f"Updated {moment:%X}"


def format_error(exc: BaseException) -> str:
    message = str(exc).strip() or type(exc).__name__
    return f"Error: {message}"


class RefreshCoordinator:
    """Runs at most one provider call at a time.

    A trigger that lands while a refresh is running is remembered as one
    pending re-run; any further triggers before that re-run starts are
    folded into it. Failures leave the stored snapshot and every rendered
    value alone and only replace the status line.
    """

    def __init__(
        self,
        provider: UsageProvider,
        store: SnapshotStore,
        renderer: Renderer,
        surface: DisplaySurface,
        host: HostWindow | None = None,
        width: int = DEFAULT_WIDTH,
        wall_clock: WallClock | None = None,
    ) -> None:
        self._provider = provider
        self.store = store
        self.renderer = renderer
        self.surface = surface
        self.host = host
        self.width = width
        self._wall_clock = wall_clock or datetime.now

        self.state = RefreshState.IDLE
        self.last_error: str | None = None
        self.last_updated: datetime | None = None
        self._task: asyncio.Task | None = None
        self._pending: RefreshTrigger | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def request_refresh(self, trigger: RefreshTrigger = RefreshTrigger.MANUAL) -> asyncio.Task:
        """Schedule a refresh from synchronous code (event callbacks, buttons).

        Must be called on the event loop thread. Returns the task that will
        carry out the work.
        """
        if self.in_flight:
            if self._pending is None:
                logger.debug(f"[refresh] {trigger.value} trigger queued behind running refresh")
                self._pending = trigger
            else:
                logger.debug(f"[refresh] {trigger.value} trigger coalesced")
            return self._task

        self._task = asyncio.get_running_loop().create_task(
            self._drain(trigger),
            name="usage-refresh",
        )
        return self._task

    async def refresh(self, trigger: RefreshTrigger = RefreshTrigger.MANUAL) -> RefreshState:
        """Trigger a refresh and wait until it (and any queued re-run) is done."""
        await self.request_refresh(trigger)
        return self.state

    async def wait_idle(self) -> None:
        while self._task is not None and not self._task.done():
            await self._task

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _drain(self, trigger: RefreshTrigger) -> RefreshState:
        next_trigger: RefreshTrigger | None = trigger
        while next_trigger is not None:
            await self._run_cycle(next_trigger)
            next_trigger, self._pending = self._pending, None
        return self.state

    async def _run_cycle(self, trigger: RefreshTrigger) -> None:
        logger.debug(f"[refresh] Starting ({trigger.value})")
        self.state = RefreshState.REFRESHING
        self.surface.set_busy(True)
        try:
            snapshot = await self._provider()
            if not isinstance(snapshot, UsageSnapshot):
                raise UsageProviderError("Usage provider returned no data")

            # Render first: a snapshot that cannot be displayed never reaches the store.
            self.renderer.render(snapshot)
            stamp = self._wall_clock()
            self.store.replace(snapshot, updated_at=stamp)
            self.last_updated = stamp
            self.last_error = None
            self.surface.set_status(format_updated(stamp))

            if self.host is not None:
                await fit_to_content(self.host, self.width)

            self.state = RefreshState.IDLE
            logger.debug(
                f"[refresh] Done ({trigger.value}), "
                f"estimated={snapshot.estimated}, tier={snapshot.tier_name}"
            )
        except Exception as exc:
            self.state = RefreshState.ERROR
            text = format_error(exc)
            self.last_error = text
            self.surface.set_status(text, error=True)
            logger.warning(f"[refresh] Failed ({trigger.value}): {exc}")
        finally:
            self.surface.set_busy(False)
