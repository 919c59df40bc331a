"""Per-model token prices (USD per million tokens)."""

from __future__ import annotations

# (input, output, cache_read, cache_create)
_OPUS = (15.0, 75.0, 1.50, 18.75)
_HAIKU = (0.80, 4.0, 0.08, 1.0)
_SONNET = (3.0, 15.0, 0.30, 3.75)


def get_prices(model: str) -> tuple[float, float, float, float]:
    """Return prices for ``model``; unknown models are billed as Sonnet."""
    name = (model or "").lower()
    if "opus" in name:
        return _OPUS
    if "haiku" in name:
        return _HAIKU
    return _SONNET


def calculate_cost(
    model: str,
    input_tokens: int,
    output_tokens: int,
    cache_read_tokens: int,
    cache_create_tokens: int,
) -> float:
    input_price, output_price, cache_read_price, cache_create_price = get_prices(model)
    return (
        input_tokens * input_price
        + output_tokens * output_price
        + cache_read_tokens * cache_read_price
        + cache_create_tokens * cache_create_price
    ) / 1_000_000.0
