"""Utility functions for usage-meter."""

from usage_meter.utils.helpers import (
    ensure_dir,
    format_iso_timestamp,
    get_data_path,
    parse_iso_timestamp,
)

__all__ = ["ensure_dir", "format_iso_timestamp", "get_data_path", "parse_iso_timestamp"]
