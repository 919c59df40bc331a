"""Post-render window sizing."""

from __future__ import annotations

from loguru import logger

from usage_meter.meter.surface import HostWindow

DEFAULT_WIDTH = 340


async def fit_to_content(host: HostWindow, width: int = DEFAULT_WIDTH) -> tuple[int, int] | None:
    """Resize ``host`` to its measured content height at a fixed width.

    Sizing never affects the displayed figures, so failures are logged and
    swallowed here; returns the applied size or None.
    """
    try:
        height = int(await host.content_height())
        await host.resize_to(width, height)
    except Exception as exc:
        logger.warning(f"[gui] Resize to content failed: {exc}")
        return None
    return width, height
