"""Pure display formatting for usage figures.

Nothing in here touches the clock, the store or the UI; callers pass ``now``
explicitly so the same inputs always give the same strings.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

from usage_meter.usage.models import RateLimitStatus
from usage_meter.utils.helpers import parse_iso_timestamp

BAND_NEUTRAL = ""
BAND_WARN = "warn"
BAND_DANGER = "danger"

WARN_THRESHOLD = 70.0
DANGER_THRESHOLD = 90.0

TIER_PREFIX = "default_claude_"
RATE_LIMITED_SUFFIX = " [RATE LIMITED]"

NO_ACTIVE_WINDOW = "No active window"
RESETTING_SOON = "Resetting soon..."


def format_tokens(n: int) -> str:
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}K"
    return str(int(n))


def format_cost(usd: float) -> str:
    if usd >= 100:
        return f"${usd:.0f}"
    if usd >= 10:
        return f"${usd:.1f}"
    return f"${usd:.2f}"


def format_budget(usd: float) -> str:
    """Budgets are round numbers, so always whole dollars."""
    return f"${usd:.0f}"


def threshold_class(percent: float) -> str:
    if percent >= DANGER_THRESHOLD:
        return BAND_DANGER
    if percent >= WARN_THRESHOLD:
        return BAND_WARN
    return BAND_NEUTRAL


def clamp_bar(percent: float) -> float:
    """Bar width in percent; the label keeps the unclamped figure."""
    return min(max(percent, 0.0), 100.0)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_percent(percent: float, over_budget: bool = False, estimated: bool = False) -> str:
    """Percent label, e.g. ``"42% used"``, ``"~100%+ used"``.

    The ``100%+`` override follows cost vs budget, not ``percent > 100``.
    """
    prefix = "~" if estimated else ""
    value = "100%+" if over_budget else f"{_round_half_up(percent)}%"
    return f"{prefix}{value} used"


def format_tier(tier_name: str, rate_limit_status: RateLimitStatus | str | None = None) -> str:
    tier = (tier_name or "").replace(TIER_PREFIX, "")
    status = rate_limit_status.value if isinstance(rate_limit_status, RateLimitStatus) else rate_limit_status
    suffix = RATE_LIMITED_SUFFIX if status == RateLimitStatus.RATE_LIMITED.value else ""
    return f"Tier: {tier}{suffix}"


def _clock_time(local: datetime, meridiem: str) -> str:
    """12-hour clock when the locale names AM/PM, otherwise 24-hour."""
    if not meridiem:
        return f"{local:%H:%M}"
    hour = local.hour % 12 or 12
    return f"{hour}:{local:%M} {meridiem}"


def _absolute_time(moment: datetime) -> str:
    local = moment.astimezone()
    return f"{local:%b} {local.day}, {_clock_time(local, local.strftime('%p'))}"


def format_reset_time(timestamp: str | datetime | None, now: datetime | None = None) -> str:
    """Countdown text for a window's reset time.

    None means there is no active window. Past timestamps read as
    "Resetting soon...". Under a day shows hours and whole minutes; anything
    further out shows the local calendar time.
    """
    if timestamp is None or timestamp == "":
        return NO_ACTIVE_WINDOW

    reset_at = parse_iso_timestamp(timestamp) if isinstance(timestamp, str) else timestamp
    if reset_at.tzinfo is None:
        reset_at = reset_at.replace(tzinfo=timezone.utc)
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)

    remaining = (reset_at - current).total_seconds()
    if remaining <= 0:
        return RESETTING_SOON

    total_minutes = int(remaining // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours < 24:
        if hours == 0:
            return f"Resets in {minutes}m"
        return f"Resets in {hours}h {minutes}m"

    return f"Resets {_absolute_time(reset_at)}"
