from datetime import datetime, timedelta, timezone

import pytest

from bagshub.market.formatting import (
    compact,
    format_currency,
    format_number,
    format_percent,
    format_price,
    format_relative_time,
    is_valid_solana_address,
    truncate_address,
)


class TestFormatCurrency:
    def test_compact_millions(self):
        assert format_currency(1_500_000, compact_mode=True) == "$1.5M"

    def test_compact_billions(self):
        assert format_currency(2_500_000_000, compact_mode=True) == "$2.5B"

    def test_compact_ignored_below_million(self):
        assert format_currency(12_345.678, compact_mode=True) == "$12,345.68"

    def test_tiny_values_use_exponential(self):
        text = format_currency(0.0000003)
        assert text == "$3.0000e-07"
        assert "e" in text

    def test_sub_dollar_keeps_at_least_four_decimals(self):
        assert format_currency(0.5) == "$0.5000"
        assert format_currency(0.000123) == "$0.000123"

    def test_regular_amount(self):
        assert format_currency(1234.5) == "$1,234.50"

    def test_zero(self):
        assert format_currency(0) == "$0.0000"


class TestCompact:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (999, "999"),
            (2_346, "2.35K"),
            (1_000_000, "1M"),
            (999_999, "1M"),
            (-4_200, "-4.2K"),
            (3_000_000_000_000, "3T"),
        ],
    )
    def test_suffixes(self, value, expected):
        assert compact(value) == expected


class TestFormatNumber:
    def test_compact_by_default(self):
        assert format_number(1_500_000).endswith("M")

    def test_plain_small(self):
        assert format_number(42.5) == "42.5"

    def test_non_compact(self):
        assert format_number(1_234_567, compact_mode=False) == "1,234,567"


class TestFormatPercent:
    @pytest.mark.parametrize("value", [0, 0.0, 0.001, 5, 1234.5])
    def test_non_negative_always_has_plus(self, value):
        assert format_percent(value).startswith("+")

    def test_negative(self):
        assert format_percent(-3.2) == "-3.20%"

    def test_decimals(self):
        assert format_percent(12.3456, decimals=1) == "+12.3%"


class TestFormatPrice:
    def test_tiny(self):
        assert format_price(0.00001234) == "1.23e-05"

    def test_sub_dollar(self):
        assert format_price(0.0042) == "0.004200"

    def test_dollar_plus(self):
        assert format_price(12.5) == "12.50"


class TestAddresses:
    def test_truncate(self):
        assert truncate_address("So11111111111111111111111111111111111111112") == "So11...1112"

    def test_truncate_short_is_untouched(self):
        assert truncate_address("abc") == "abc"

    @pytest.mark.parametrize(
        "address",
        [
            "So11111111111111111111111111111111111111112",
            "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
        ],
    )
    def test_valid_solana_addresses(self, address):
        assert is_valid_solana_address(address)

    @pytest.mark.parametrize(
        "address",
        [
            "",
            "short",
            "0x1234567890abcdef1234567890abcdef12345678",  # 0 and x outside base58
            "O" * 40,
            "1" * 45,
        ],
    )
    def test_invalid_solana_addresses(self, address):
        assert not is_valid_solana_address(address)


class TestRelativeTime:
    NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_none(self):
        assert format_relative_time(None) == "-"

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(seconds=30), "just now"),
            (timedelta(minutes=5), "5m ago"),
            (timedelta(hours=3), "3h ago"),
            (timedelta(days=2), "2d ago"),
        ],
    )
    def test_recent(self, delta, expected):
        assert format_relative_time(self.NOW - delta, now=self.NOW) == expected

    def test_old_dates_show_month_day(self):
        assert format_relative_time(datetime(2026, 1, 5, tzinfo=timezone.utc), now=self.NOW) == "Jan 5"

    def test_naive_datetime_treated_as_utc(self):
        assert format_relative_time(datetime(2026, 3, 1, 11, 0), now=self.NOW) == "1h ago"
