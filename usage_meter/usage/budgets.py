"""USD budgets per window, by subscription tier."""

from __future__ import annotations

from dataclasses import dataclass

from usage_meter.config.schema import BudgetOverrides


@dataclass(frozen=True)
class Budgets:
    five_hour: float
    weekly: float
    weekly_sonnet: float


_PRO = Budgets(five_hour=18.6, weekly=218.0, weekly_sonnet=32.0)

TIER_BUDGETS: dict[str, Budgets] = {
    "default_claude_pro": _PRO,
    "default_claude_max_5x": Budgets(five_hour=93.0, weekly=1090.0, weekly_sonnet=160.0),
    "default_claude_max_20x": Budgets(five_hour=372.0, weekly=4360.0, weekly_sonnet=640.0),
}


def tier_defaults(tier: str) -> Budgets:
    """Unknown tiers fall back to the Pro budgets."""
    return TIER_BUDGETS.get(tier, _PRO)


def resolve_budgets(tier: str, overrides: BudgetOverrides | None = None) -> Budgets:
    defaults = tier_defaults(tier)
    if overrides is None:
        return defaults
    return Budgets(
        five_hour=overrides.five_hour if overrides.five_hour is not None else defaults.five_hour,
        weekly=overrides.weekly if overrides.weekly is not None else defaults.weekly,
        weekly_sonnet=(
            overrides.weekly_sonnet
            if overrides.weekly_sonnet is not None
            else defaults.weekly_sonnet
        ),
    )
