"""Main customtkinter widget window."""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from pathlib import Path
from typing import Callable, TypeVar

import customtkinter as ctk
from loguru import logger

from usage_meter.gui import theme
from usage_meter.gui.state_store import WindowPosition, load_window_position, save_window_position
from usage_meter.gui.widgets.status_bar import StatusBar
from usage_meter.gui.widgets.usage_section import UsageSection
from usage_meter.meter.surface import WINDOW_TITLES, WindowView
from usage_meter.usage.models import WEEKLY_SONNET, WINDOW_KEYS

T = TypeVar("T")

OnAction = Callable[[], None]

_REFRESH_IDLE = "↻"
_REFRESH_BUSY = "…"


class MeterApp:
    """Always-on-top usage widget.

    Implements the DisplaySurface and HostWindow interfaces. All of those
    methods may be called from the asyncio thread; widget work is always
    marshalled onto the Tk thread.
    """

    def __init__(
        self,
        width: int = theme.WINDOW_WIDTH,
        always_on_top: bool = True,
        appearance: str = "dark",
        on_refresh: OnAction | None = None,
        on_ready: OnAction | None = None,
        on_hide: OnAction | None = None,
        on_close: OnAction | None = None,
        state_path: Path | None = None,
    ) -> None:
        self._width = width
        self._always_on_top = always_on_top
        self._appearance = appearance
        self.on_refresh = on_refresh
        self.on_ready = on_ready
        self.on_hide = on_hide
        self.on_close = on_close
        self._state_path = state_path

        self._root: ctk.CTk | None = None
        self._ui_thread_id: int | None = None
        self._pending_calls: list[Callable[[], None]] = []
        self._content: ctk.CTkFrame | None = None
        self._sections: dict[str, UsageSection] = {}
        self._status_bar: StatusBar | None = None
        self._refresh_btn: ctk.CTkButton | None = None

    def run(self) -> None:
        """Build widgets and run the Tk mainloop (blocks)."""
        theme.setup_theme(self._appearance)
        root = ctk.CTk()
        self._root = root
        self._ui_thread_id = threading.get_ident()

        root.title("Claude Usage Meter")
        root.resizable(False, False)
        root.configure(fg_color=theme.COLOR_BG_APP)
        if self._always_on_top:
            root.attributes("-topmost", True)
        position = load_window_position(path=self._state_path)
        if position:
            root.geometry(f"{self._width}x340+{position.x}+{position.y}")
        else:
            root.geometry(f"{self._width}x340")
        root.protocol("WM_DELETE_WINDOW", self._handle_close)
        root.grid_columnconfigure(0, weight=1)
        root.grid_rowconfigure(0, weight=1)

        content = ctk.CTkFrame(root, fg_color="transparent")
        content.grid(row=0, column=0, sticky="new")
        content.grid_columnconfigure(0, weight=1)
        self._content = content

        header = ctk.CTkFrame(content, fg_color="transparent")
        header.grid(row=0, column=0, sticky="ew", padx=10, pady=(8, 4))
        header.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(
            header,
            text="Claude Usage",
            anchor="w",
            text_color=theme.COLOR_TEXT,
            font=theme.font(2, "bold"),
        ).grid(row=0, column=0, sticky="w")
        self._refresh_btn = ctk.CTkButton(
            header,
            text=_REFRESH_IDLE,
            width=28,
            height=24,
            fg_color="transparent",
            hover_color=theme.COLOR_BORDER,
            text_color=theme.COLOR_TEXT_MUTED,
            command=self._handle_refresh,
        )
        self._refresh_btn.grid(row=0, column=1, padx=(4, 0))
        ctk.CTkButton(
            header,
            text="–",
            width=28,
            height=24,
            fg_color="transparent",
            hover_color=theme.COLOR_BORDER,
            text_color=theme.COLOR_TEXT_MUTED,
            command=self._handle_hide,
        ).grid(row=0, column=2, padx=(4, 0))

        for row, key in enumerate(WINDOW_KEYS, start=1):
            section = UsageSection(content, title=WINDOW_TITLES[key], show_tokens=key != WEEKLY_SONNET)
            section.grid(row=row, column=0, sticky="ew", padx=10, pady=4)
            self._sections[key] = section

        self._status_bar = StatusBar(content)
        self._status_bar.grid(row=len(WINDOW_KEYS) + 1, column=0, sticky="ew", pady=(2, 4))

        self._apply_pending_calls()
        if self.on_ready:
            self.on_ready()

        root.mainloop()

    def stop(self) -> None:
        """Close the window safely from any thread."""
        self._run_on_ui(self._handle_close)

    # ------------------------------------------------------------------
    # DisplaySurface
    # ------------------------------------------------------------------

    def apply_window(self, view: WindowView) -> None:
        self._run_on_ui(lambda: self._apply_window_ui(view))

    def set_reset_label(self, key: str, text: str) -> None:
        self._run_on_ui(lambda: self._set_reset_ui(key, text))

    def set_tier(self, text: str) -> None:
        self._run_on_ui(lambda: self._status_bar.set_tier(text) if self._status_bar else None)

    def set_status(self, text: str, error: bool = False) -> None:
        self._run_on_ui(
            lambda: self._status_bar.set_status(text, error=error) if self._status_bar else None
        )

    def set_busy(self, busy: bool) -> None:
        self._run_on_ui(lambda: self._set_busy_ui(busy))

    # ------------------------------------------------------------------
    # HostWindow
    # ------------------------------------------------------------------

    async def content_height(self) -> int:
        return await self._call_on_ui(self._measure_content_ui)

    async def resize_to(self, width: int, height: int) -> None:
        await self._call_on_ui(lambda: self._resize_ui(width, height))

    async def hide(self) -> None:
        await self._call_on_ui(self._hide_ui)

    # ------------------------------------------------------------------
    # UI-thread handlers
    # ------------------------------------------------------------------

    def _apply_window_ui(self, view: WindowView) -> None:
        section = self._sections.get(view.key)
        if section is not None:
            section.apply(view)

    def _set_reset_ui(self, key: str, text: str) -> None:
        section = self._sections.get(key)
        if section is not None:
            section.set_reset(text)

    def _set_busy_ui(self, busy: bool) -> None:
        if self._refresh_btn is not None:
            self._refresh_btn.configure(text=_REFRESH_BUSY if busy else _REFRESH_IDLE)

    def _measure_content_ui(self) -> int:
        if self._root is None or self._content is None:
            raise RuntimeError("Window is not running")
        self._root.update_idletasks()
        return int(self._content.winfo_reqheight())

    def _resize_ui(self, width: int, height: int) -> None:
        if self._root is None:
            raise RuntimeError("Window is not running")
        self._root.geometry(f"{width}x{height}")

    def _hide_ui(self) -> None:
        if self._root is None:
            return
        logger.debug("[gui] Hiding widget")
        self._root.iconify()

    def _handle_refresh(self) -> None:
        if self.on_refresh:
            self.on_refresh()

    def _handle_hide(self) -> None:
        if self.on_hide:
            self.on_hide()
        else:
            self._hide_ui()

    # ------------------------------------------------------------------
    # Thread marshalling
    # ------------------------------------------------------------------

    def _run_on_ui(self, fn: Callable[[], None]) -> None:
        if self._root is None:
            self._pending_calls.append(fn)
            return
        if threading.get_ident() == self._ui_thread_id:
            fn()
            return
        self._root.after(0, fn)

    async def _call_on_ui(self, fn: Callable[[], T]) -> T:
        """Run ``fn`` on the Tk thread and await its result."""
        if self._root is None:
            raise RuntimeError("Window is not running")
        future: concurrent.futures.Future = concurrent.futures.Future()

        def _invoke() -> None:
            try:
                future.set_result(fn())
            except Exception as exc:
                future.set_exception(exc)

        self._run_on_ui(_invoke)
        return await asyncio.wrap_future(future)

    def _apply_pending_calls(self) -> None:
        queued = list(self._pending_calls)
        self._pending_calls.clear()
        for fn in queued:
            fn()

    def _handle_close(self) -> None:
        root = self._root
        if root:
            self._persist_position(root)
        if self.on_close:
            self.on_close()
        if root:
            try:
                root.quit()
                root.destroy()
            except Exception as exc:
                logger.warning("Error during GUI shutdown: {}", exc)
            self._root = None

    def _persist_position(self, root: ctk.CTk) -> None:
        try:
            save_window_position(
                WindowPosition(x=int(root.winfo_x()), y=int(root.winfo_y())),
                path=self._state_path,
            )
        except Exception as exc:
            logger.warning("Failed to persist window position: {}", exc)
