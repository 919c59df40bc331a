"""Configuration schema for usage-meter."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class GUIConfig(BaseModel):
    """Desktop widget configuration."""

    theme: str = "dark"
    width: int = 340
    always_on_top: bool = True
    font_size: int = 13


class RefreshConfig(BaseModel):
    """Timers and provider behaviour."""

    auto_refresh_s: float = 60.0
    countdown_s: float = 30.0
    api_timeout_s: float = 5.0
    use_api: bool = True


class BudgetOverrides(BaseModel):
    """Per-window USD budgets replacing the tier defaults when set."""

    five_hour: float | None = None
    weekly: float | None = None
    weekly_sonnet: float | None = None


class Config(BaseSettings):
    """Root configuration for usage-meter."""

    gui: GUIConfig = Field(default_factory=GUIConfig)
    refresh: RefreshConfig = Field(default_factory=RefreshConfig)
    budgets: BudgetOverrides = Field(default_factory=BudgetOverrides)
    claude_dir: str = "~/.claude"

    @property
    def claude_path(self) -> Path:
        """Get expanded Claude Code data directory."""
        return Path(self.claude_dir).expanduser()

    model_config = ConfigDict(
        env_prefix="USAGE_METER_",
        env_nested_delimiter="__",
        extra="ignore",
    )
