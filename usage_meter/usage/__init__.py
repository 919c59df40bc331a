"""Usage data: snapshot models and the Claude usage provider."""

from usage_meter.usage.models import (
    RateLimitStatus,
    TokenUsage,
    UsageProviderError,
    UsageSnapshot,
    UsageWindow,
)
from usage_meter.usage.service import UsageService

__all__ = [
    "RateLimitStatus",
    "TokenUsage",
    "UsageProviderError",
    "UsageService",
    "UsageSnapshot",
    "UsageWindow",
]
