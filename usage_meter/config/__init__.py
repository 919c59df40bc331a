"""Configuration module for usage-meter."""

from usage_meter.config.loader import get_config_path, load_config, save_config
from usage_meter.config.schema import Config

__all__ = ["Config", "load_config", "save_config", "get_config_path"]
