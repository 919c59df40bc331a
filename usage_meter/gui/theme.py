"""Shared GUI theme defaults."""

from __future__ import annotations

import customtkinter as ctk

WINDOW_WIDTH = 340
FONT_SIZE = 13
FONT_FAMILY = "Segoe UI"

COLOR_BG_APP = "#0E1116"
COLOR_BG_PANEL = "#131A22"
COLOR_BORDER = "#223247"
COLOR_TEXT = "#D9E2EF"
COLOR_TEXT_MUTED = "#93A3B8"
COLOR_BAR_TRACK = "#1D2734"
COLOR_SUCCESS = "#39C172"
COLOR_WARN = "#FFA940"    # amber
COLOR_DANGER = "#EA5F5F"

# Threshold band -> bar / percent colour. "" is the neutral band.
BAND_COLORS = {
    "": COLOR_SUCCESS,
    "warn": COLOR_WARN,
    "danger": COLOR_DANGER,
}


def band_color(band: str) -> str:
    """Return bar colour for a threshold band."""
    return BAND_COLORS.get(band or "", COLOR_SUCCESS)


def font(size_delta: int = 0, weight: str = "normal") -> tuple[str, int, str]:
    return (FONT_FAMILY, FONT_SIZE + size_delta, weight)


def setup_theme(mode: str = "dark") -> None:
    """Apply global appearance settings."""
    ctk.set_appearance_mode(mode)
    ctk.set_default_color_theme("blue")
