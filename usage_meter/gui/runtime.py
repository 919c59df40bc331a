"""Asyncio side of the desktop widget.

The Tk mainloop owns the main thread; this runtime owns a daemon thread
running one asyncio loop on which the coordinator, the countdown ticker and
the auto-refresh pulse live. Tk callbacks hop over with
``call_soon_threadsafe``.
"""

from __future__ import annotations

import asyncio
import threading

from loguru import logger

from usage_meter.config.schema import Config
from usage_meter.gui.events import USAGE_UPDATED, EventHub
from usage_meter.gui.pulse import RefreshPulse
from usage_meter.meter.coordinator import RefreshCoordinator, RefreshTrigger, UsageProvider
from usage_meter.meter.renderer import Renderer
from usage_meter.meter.store import SnapshotStore
from usage_meter.meter.surface import DisplaySurface, HostWindow
from usage_meter.meter.ticker import CountdownTicker
from usage_meter.usage.service import UsageService


class MeterRuntime:
    """Owns the store, renderer, coordinator, ticker and pulse."""

    def __init__(
        self,
        config: Config,
        surface: DisplaySurface,
        host: HostWindow | None = None,
        provider: UsageProvider | None = None,
        hub: EventHub | None = None,
    ) -> None:
        self.config = config
        self.host = host
        self.hub = hub or EventHub()
        self.store = SnapshotStore()
        self.renderer = Renderer(surface, self.store)
        self.coordinator = RefreshCoordinator(
            provider=provider or UsageService.from_config(config).fetch,
            store=self.store,
            renderer=self.renderer,
            surface=surface,
            host=host,
            width=config.gui.width,
        )
        self.ticker = CountdownTicker(self.renderer, interval_s=config.refresh.countdown_s)
        self.pulse = RefreshPulse(self.hub, interval_s=config.refresh.auto_refresh_s)

        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._unsubscribe = None

    # ------------------------------------------------------------------
    # Loop-thread entry points
    # ------------------------------------------------------------------

    async def boot(self) -> None:
        """Subscribe to pushes, start timers and fire the startup refresh."""
        self._unsubscribe = self.hub.subscribe(USAGE_UPDATED, self._on_usage_updated)
        await self.ticker.start()
        if self.config.refresh.auto_refresh_s > 0:
            await self.pulse.start()
        self.coordinator.request_refresh(RefreshTrigger.STARTUP)

    async def shutdown(self) -> None:
        self.pulse.stop()
        self.ticker.stop()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_usage_updated(self, _payload: object) -> None:
        self.coordinator.request_refresh(RefreshTrigger.PUSHED)

    async def hide(self) -> None:
        """Hide button handler, run on the loop thread."""
        if self.host is None:
            return
        try:
            await self.host.hide()
        except Exception as exc:
            logger.warning(f"[gui] Hide failed: {exc}")

    # ------------------------------------------------------------------
    # Thread management (called from the Tk thread)
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        loop = asyncio.new_event_loop()
        self._loop = loop
        self._thread = threading.Thread(
            target=self._run_loop,
            args=(loop,),
            daemon=True,
            name="usage-meter-loop",
        )
        self._thread.start()
        asyncio.run_coroutine_threadsafe(self.boot(), loop)
        logger.info("[gui] Runtime started")

    def request_manual_refresh(self) -> None:
        """Refresh button handler."""
        if self._loop is None:
            return
        self._loop.call_soon_threadsafe(self.coordinator.request_refresh, RefreshTrigger.MANUAL)

    def request_hide(self) -> None:
        if self._loop is None:
            return
        asyncio.run_coroutine_threadsafe(self.hide(), self._loop)

    def stop(self, timeout_s: float = 2.0) -> None:
        loop = self._loop
        if loop is None:
            return
        future = asyncio.run_coroutine_threadsafe(self.shutdown(), loop)
        try:
            future.result(timeout=timeout_s)
        except Exception as exc:
            logger.warning(f"[gui] Runtime shutdown incomplete: {exc}")
        loop.call_soon_threadsafe(loop.stop)
        if self._thread is not None:
            self._thread.join(timeout=1.0)
        self._loop = None
        self._thread = None

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            loop.close()
