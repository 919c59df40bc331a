"""Client for the Claude OAuth usage endpoint."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any

from usage_meter.usage.models import UsageProviderError

USAGE_API_URL = "https://api.anthropic.com/api/oauth/usage"
ANTHROPIC_BETA = "oauth-2025-04-20"
ANTHROPIC_VERSION = "2023-06-01"

# API field -> snapshot window key
API_WINDOWS = {
    "five_hour": "five_hour",
    "seven_day": "weekly",
    "seven_day_sonnet": "weekly_sonnet",
}


class UsageAPIError(UsageProviderError):
    """Usage endpoint failed; ``status`` is the HTTP code when there was one."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status

    @property
    def rate_limited(self) -> bool:
        return self.status == 429


@dataclass(frozen=True)
class ApiWindow:
    utilization: float | None = None
    resets_at: str | None = None


def parse_api_usage(body: Any) -> dict[str, ApiWindow]:
    """Map the endpoint's JSON body to ``{window_key: ApiWindow}``.

    Windows absent from the body are left out.
    """
    if not isinstance(body, dict):
        raise UsageAPIError("Usage API returned a non-object body")

    result: dict[str, ApiWindow] = {}
    for api_key, window_key in API_WINDOWS.items():
        entry = body.get(api_key)
        if not isinstance(entry, dict):
            continue
        utilization = entry.get("utilization")
        resets_at = entry.get("resets_at")
        result[window_key] = ApiWindow(
            utilization=float(utilization) if isinstance(utilization, (int, float)) else None,
            resets_at=resets_at if isinstance(resets_at, str) and resets_at else None,
        )
    return result


def fetch_api_usage(access_token: str, timeout_s: float = 5.0) -> dict[str, ApiWindow]:
    """Blocking GET of the usage endpoint."""
    headers = {
        "Authorization": f"Bearer {access_token}",
        "Content-Type": "application/json",
        "anthropic-beta": ANTHROPIC_BETA,
        "anthropic-version": ANTHROPIC_VERSION,
    }
    req = urllib.request.Request(USAGE_API_URL, headers=headers, method="GET")

    try:
        with urllib.request.urlopen(req, timeout=timeout_s) as resp:
            status = getattr(resp, "status", 200)
            if status != 200:
                raise UsageAPIError(f"Usage API returned status {status}", status=status)
            raw = resp.read().decode("utf-8", errors="ignore")
    except urllib.error.HTTPError as exc:
        raise UsageAPIError(f"Usage API returned status {exc.code}", status=exc.code) from exc
    except urllib.error.URLError as exc:
        raise UsageAPIError(f"Usage API connection error: {exc.reason}") from exc

    try:
        body = json.loads(raw)
    except ValueError as exc:
        raise UsageAPIError(f"Usage API returned invalid JSON: {exc}") from exc
    return parse_api_usage(body)
