"""Countdown ticker: keeps the reset labels live between refreshes.

Usage:
    ticker = CountdownTicker(renderer, interval_s=30.0)
    await ticker.start()
    ...
    ticker.stop()
"""

from __future__ import annotations

import asyncio

from loguru import logger

from usage_meter.meter.renderer import Renderer

DEFAULT_INTERVAL_S = 30.0


class CountdownTicker:
    """Re-renders only the time-remaining labels on a fixed period.

    Never fetches, never touches the busy indicator, and does nothing while
    the store is still empty.
    """

    def __init__(self, renderer: Renderer, interval_s: float = DEFAULT_INTERVAL_S) -> None:
        self.renderer = renderer
        self.interval_s = interval_s

        self._task: asyncio.Task | None = None
        self._running = False
        self.ticks = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the background ticking task."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop(), name="usage-countdown")
        logger.debug(f"[ticker] Started, interval={self.interval_s}s")

    def stop(self) -> None:
        """Cancel the background task."""
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    @property
    def running(self) -> bool:
        return self._running

    def tick(self) -> bool:
        """Run one firing now. Returns False when there was nothing to update."""
        self.ticks += 1
        return self.renderer.render_reset_times() is not None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_s)
                if self._running:
                    self.tick()
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.warning(f"[ticker] Countdown update failed: {exc}")
