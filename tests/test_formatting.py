from datetime import datetime, timedelta, timezone

import pytest

from usage_meter.meter.formatting import (
    BAND_DANGER,
    BAND_NEUTRAL,
    BAND_WARN,
    NO_ACTIVE_WINDOW,
    RESETTING_SOON,
    _clock_time,
    clamp_bar,
    format_budget,
    format_cost,
    format_percent,
    format_reset_time,
    format_tier,
    format_tokens,
    threshold_class,
)
from usage_meter.usage.models import RateLimitStatus

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestFormatTokens:
    @pytest.mark.parametrize(
        "count,expected",
        [
            (0, "0"),
            (999, "999"),
            (1_000, "1.0K"),
            (12_345, "12.3K"),
            (999_999, "1000.0K"),
            (1_000_000, "1.0M"),
            (2_500_000, "2.5M"),
        ],
    )
    def test_thresholds(self, count, expected):
        assert format_tokens(count) == expected


class TestFormatCost:
    @pytest.mark.parametrize(
        "usd,expected",
        [
            (0, "$0.00"),
            (9.99, "$9.99"),
            (10.0, "$10.0"),
            (12.34, "$12.3"),
            (100.0, "$100"),
            (218.4, "$218"),
        ],
    )
    def test_precision_steps(self, usd, expected):
        assert format_cost(usd) == expected

    def test_budget_is_whole_dollars(self):
        assert format_budget(218.0) == "$218"
        assert format_budget(1090) == "$1090"


class TestThresholds:
    @pytest.mark.parametrize(
        "percent,band",
        [
            (0, BAND_NEUTRAL),
            (69.9, BAND_NEUTRAL),
            (70, BAND_WARN),
            (89.9, BAND_WARN),
            (90, BAND_DANGER),
            (150, BAND_DANGER),
        ],
    )
    def test_bands(self, percent, band):
        assert threshold_class(percent) == band

    def test_bar_is_clamped(self):
        assert clamp_bar(-5) == 0.0
        assert clamp_bar(42.5) == 42.5
        assert clamp_bar(140) == 100.0


class TestFormatPercent:
    def test_rounds_half_up(self):
        assert format_percent(42.4) == "42% used"
        assert format_percent(42.5) == "43% used"
        assert format_percent(0.5) == "1% used"

    def test_over_budget_follows_flag_not_percent(self):
        assert format_percent(100.0, over_budget=True) == "100%+ used"
        assert format_percent(130.0, over_budget=False) == "130% used"

    def test_estimated_prefix(self):
        assert format_percent(42.0, estimated=True) == "~42% used"
        assert format_percent(100.0, over_budget=True, estimated=True) == "~100%+ used"


class TestFormatTier:
    def test_strips_prefix(self):
        assert format_tier("default_claude_max_5x") == "Tier: max_5x"

    def test_rate_limited_suffix(self):
        assert (
            format_tier("default_claude_pro", RateLimitStatus.RATE_LIMITED)
            == "Tier: pro [RATE LIMITED]"
        )
        assert format_tier("default_claude_pro", "rate_limited") == "Tier: pro [RATE LIMITED]"

    def test_normal_status_has_no_suffix(self):
        assert format_tier("unknown", RateLimitStatus.NORMAL) == "Tier: unknown"
        assert format_tier("unknown", None) == "Tier: unknown"


class TestFormatResetTime:
    def test_no_window(self):
        assert format_reset_time(None, NOW) == NO_ACTIVE_WINDOW
        assert format_reset_time("", NOW) == NO_ACTIVE_WINDOW

    def test_past_or_now_is_resetting_soon(self):
        assert format_reset_time(NOW - timedelta(minutes=5), NOW) == RESETTING_SOON
        assert format_reset_time(NOW, NOW) == RESETTING_SOON

    def test_hours_and_minutes(self):
        assert format_reset_time(NOW + timedelta(minutes=90), NOW) == "Resets in 1h 30m"

    def test_minutes_only(self):
        assert format_reset_time(NOW + timedelta(minutes=45), NOW) == "Resets in 45m"

    def test_floors_to_whole_minutes(self):
        assert format_reset_time(NOW + timedelta(seconds=30), NOW) == "Resets in 0m"
        assert format_reset_time(NOW + timedelta(minutes=59, seconds=59), NOW) == "Resets in 59m"

    def test_accepts_iso_string(self):
        assert format_reset_time("2025-06-01T13:30:00Z", NOW) == "Resets in 1h 30m"
        assert format_reset_time("2025-06-01T13:30:00.123456+00:00", NOW) == "Resets in 1h 30m"

    def test_day_or_more_shows_calendar_time(self):
        reset_at = NOW + timedelta(hours=40)
        text = format_reset_time(reset_at, NOW)
        local = reset_at.astimezone()

        assert text.startswith("Resets ")
        assert not text.startswith("Resets in")
        assert f"{local:%b} {local.day}," in text
        assert text.endswith(_clock_time(local, local.strftime("%p")))

    def test_clock_follows_locale_meridiem(self):
        afternoon = datetime(2025, 6, 3, 16, 5)
        midnight = datetime(2025, 6, 3, 0, 30)

        assert _clock_time(afternoon, "PM") == "4:05 PM"
        assert _clock_time(midnight, "AM") == "12:30 AM"
        # locales without AM/PM names get a 24-hour clock
        assert _clock_time(afternoon, "") == "16:05"
        assert _clock_time(midnight, "") == "00:30"

    def test_exactly_one_day_is_absolute(self):
        assert not format_reset_time(NOW + timedelta(hours=24), NOW).startswith("Resets in")
        assert format_reset_time(NOW + timedelta(hours=23, minutes=59), NOW) == "Resets in 23h 59m"

    def test_naive_inputs_are_utc(self):
        naive_now = NOW.replace(tzinfo=None)
        assert format_reset_time(naive_now + timedelta(minutes=10), naive_now) == "Resets in 10m"
