"""One budget window: title, bar, percent, cost, reset countdown, tokens."""

from __future__ import annotations

import customtkinter as ctk

from usage_meter.gui import theme
from usage_meter.meter.surface import WindowView


class UsageSection(ctk.CTkFrame):
    """Display slots for a single window's WindowView."""

    def __init__(self, master: ctk.CTkBaseClass, title: str, show_tokens: bool = True) -> None:
        super().__init__(master, fg_color=theme.COLOR_BG_PANEL, corner_radius=8)
        self.grid_columnconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=0)

        self._title = ctk.CTkLabel(
            self,
            text=title,
            anchor="w",
            text_color=theme.COLOR_TEXT,
            font=theme.font(0, "bold"),
        )
        self._title.grid(row=0, column=0, sticky="w", padx=10, pady=(8, 2))

        self._percent = ctk.CTkLabel(
            self,
            text="--",
            anchor="e",
            text_color=theme.COLOR_TEXT_MUTED,
            font=theme.font(0, "bold"),
        )
        self._percent.grid(row=0, column=1, sticky="e", padx=10, pady=(8, 2))

        self._bar = ctk.CTkProgressBar(
            self,
            height=8,
            fg_color=theme.COLOR_BAR_TRACK,
            progress_color=theme.band_color(""),
        )
        self._bar.set(0)
        self._bar.grid(row=1, column=0, columnspan=2, sticky="ew", padx=10, pady=2)

        self._cost = ctk.CTkLabel(
            self,
            text="",
            anchor="w",
            text_color=theme.COLOR_TEXT_MUTED,
            font=theme.font(-1),
        )
        self._cost.grid(row=2, column=0, sticky="w", padx=10)

        self._reset = ctk.CTkLabel(
            self,
            text="",
            anchor="e",
            text_color=theme.COLOR_TEXT_MUTED,
            font=theme.font(-1),
        )
        self._reset.grid(row=2, column=1, sticky="e", padx=10)

        self._tokens: ctk.CTkLabel | None = None
        if show_tokens:
            self._tokens = ctk.CTkLabel(
                self,
                text="",
                anchor="w",
                text_color=theme.COLOR_TEXT_MUTED,
                font=theme.font(-2),
            )
            self._tokens.grid(row=3, column=0, columnspan=2, sticky="w", padx=10, pady=(0, 8))
        else:
            self._cost.grid_configure(pady=(0, 8))
            self._reset.grid_configure(pady=(0, 8))

    def apply(self, view: WindowView) -> None:
        color = theme.band_color(view.band)
        self._bar.set(view.bar_fraction)
        self._bar.configure(progress_color=color)
        self._percent.configure(
            text=view.percent_label,
            text_color=color if view.band else theme.COLOR_TEXT_MUTED,
        )
        self._cost.configure(text=view.cost_text)
        self._reset.configure(text=view.reset_label)
        if self._tokens is not None:
            self._tokens.configure(text=view.tokens_text)

    def set_reset(self, text: str) -> None:
        self._reset.configure(text=text)
