"""Background auto-refresh pulse.

Publishes a "usage-updated" notification on a fixed interval, the same way
a host shell would push one. The meter core treats each delivery as a
refresh trigger and never polls on its own.

Usage:
    pulse = RefreshPulse(hub, interval_s=60.0)
    await pulse.start()
    ...
    pulse.stop()
"""

from __future__ import annotations

import asyncio

from loguru import logger

from usage_meter.gui.events import USAGE_UPDATED, EventHub

DEFAULT_INTERVAL_S = 60.0


class RefreshPulse:
    """Async periodic emitter of USAGE_UPDATED."""

    def __init__(self, hub: EventHub, interval_s: float = DEFAULT_INTERVAL_S) -> None:
        self.hub = hub
        self.interval_s = interval_s

        self._task: asyncio.Task | None = None
        self._running = False
        self.beats = 0

    async def start(self) -> None:
        """Start the background pulse task. The first beat comes after one interval."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop(), name="usage-pulse")
        logger.info(f"[usage] Auto-refresh every {self.interval_s}s")

    def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None

    def beat(self) -> None:
        self.beats += 1
        self.hub.publish(USAGE_UPDATED, {"source": "pulse"})

    async def _loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_s)
                if self._running:
                    self.beat()
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.warning(f"[usage] Pulse loop error: {exc}")
