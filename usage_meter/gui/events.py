"""Host event names and lightweight signal bus."""

from __future__ import annotations

from collections import defaultdict
from typing import Callable

from loguru import logger

EventHandler = Callable[[object], None]

# Pushed by the auto-refresh pulse; each delivery is one refresh trigger.
USAGE_UPDATED = "usage-updated"


class EventHub:
    """Simple in-process pub/sub between the shell and the meter core."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: EventHandler) -> Callable[[], None]:
        """Register ``handler``; the returned callable unsubscribes it."""
        self._handlers[event_name].append(handler)

        def _unsubscribe() -> None:
            handlers = self._handlers.get(event_name, [])
            if handler in handlers:
                handlers.remove(handler)

        return _unsubscribe

    def publish(self, event_name: str, payload: object = None) -> int:
        """Deliver ``payload`` to every handler; returns how many ran cleanly."""
        delivered = 0
        for handler in list(self._handlers.get(event_name, [])):
            try:
                handler(payload)
                delivered += 1
            except Exception as exc:
                logger.warning(f"[gui] {event_name} handler error: {exc}")
        return delivered
