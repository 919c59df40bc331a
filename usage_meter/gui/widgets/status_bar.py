"""Status bar widget."""

from __future__ import annotations

import customtkinter as ctk

from usage_meter.gui import theme


class StatusBar(ctk.CTkFrame):
    """Bottom lines: tier/rate-limit info and last-updated or error text."""

    def __init__(self, master: ctk.CTkBaseClass) -> None:
        super().__init__(master, fg_color="transparent", corner_radius=0)
        self.grid_columnconfigure(0, weight=1)

        self._tier = ctk.CTkLabel(
            self,
            text="Tier: --",
            anchor="w",
            text_color=theme.COLOR_TEXT_MUTED,
            font=theme.font(-1),
        )
        self._tier.grid(row=0, column=0, sticky="ew", padx=10, pady=(2, 0))

        self._status = ctk.CTkLabel(
            self,
            text="Loading...",
            anchor="w",
            text_color=theme.COLOR_TEXT_MUTED,
            font=theme.font(-2),
        )
        self._status.grid(row=1, column=0, sticky="ew", padx=10, pady=(0, 6))

    def set_tier(self, text: str) -> None:
        self._tier.configure(text=text)

    def set_status(self, text: str, error: bool = False) -> None:
        color = theme.COLOR_DANGER if error else theme.COLOR_TEXT_MUTED
        self._status.configure(text=text, text_color=color)
