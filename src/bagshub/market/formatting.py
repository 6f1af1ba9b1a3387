"""Display formatting for prices, amounts and percentages. Pure functions, also used as Jinja filters."""

import re
from datetime import datetime, timezone

COMPACT_SUFFIXES = ["", "K", "M", "B", "T"]

SOLANA_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def _trim(text: str, min_decimals: int = 0) -> str:
    """Drop trailing zeros after the decimal point, keeping at least min_decimals."""
    if "." not in text:
        return text
    whole, frac = text.split(".")
    frac = frac.rstrip("0")
    if len(frac) < min_decimals:
        frac = frac.ljust(min_decimals, "0")
    return f"{whole}.{frac}" if frac else whole


def compact(value: float, decimals: int = 2) -> str:
    """1_500_000 -> '1.5M', 2_345 -> '2.35K'. Values under 1000 are returned as plain numbers."""
    magnitude = abs(value)
    index = 0
    while magnitude >= 1000 and index < len(COMPACT_SUFFIXES) - 1:
        magnitude /= 1000
        index += 1
    rounded = round(magnitude, decimals)
    # 999_999 rounds to 1000K; promote to the next suffix
    if rounded >= 1000 and index < len(COMPACT_SUFFIXES) - 1:
        rounded = round(rounded / 1000, decimals)
        index += 1
    sign = "-" if value < 0 else ""
    return f"{sign}{_trim(f'{rounded:.{decimals}f}')}{COMPACT_SUFFIXES[index]}"


def format_currency(
    value: float,
    min_fraction_digits: int = 2,
    max_fraction_digits: int = 6,
    compact_mode: bool = False,
) -> str:
    """Format a USD amount.

    - compact_mode and value >= 1M: "$1.5M", "$2.35B"
    - 0 < value < 0.000001: exponential, "$3.0000e-07"
    - value < 1: 4 to max_fraction_digits decimals
    - otherwise: thousands separators and exactly min_fraction_digits..2 decimals
    """
    if compact_mode and value >= 1_000_000:
        return f"${compact(value)}"

    if 0 < value < 0.000001:
        return f"${value:.4e}"

    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    if value < 1:
        text = _trim(f"{magnitude:,.{max_fraction_digits}f}", min_decimals=4)
    else:
        max_digits = max(2, min_fraction_digits)
        text = _trim(f"{magnitude:,.{max_digits}f}", min_decimals=min_fraction_digits)
    return f"{sign}${text}"


def format_number(value: float, compact_mode: bool = True, decimals: int = 2) -> str:
    if compact_mode and abs(value) >= 1000:
        return compact(value, decimals)
    return _trim(f"{value:,.{decimals}f}")


def format_percent(value: float, decimals: int = 2) -> str:
    """Always signed: 5 -> '+5.00%', 0 -> '+0.00%', -3.2 -> '-3.20%'."""
    sign = "+" if value >= 0 else "-"
    return f"{sign}{abs(value):.{decimals}f}%"


def format_price(value: float) -> str:
    """Table price column: exponential below 0.0001, six decimals below 1."""
    if value < 0.0001:
        return f"{value:.2e}"
    if value < 1:
        return f"{value:.6f}"
    return f"{value:.2f}"


def truncate_address(address: str, chars: int = 4) -> str:
    if len(address) <= chars * 2 + 2:
        return address
    return f"{address[:chars]}...{address[-chars:]}"


def format_relative_time(when: datetime | None, now: datetime | None = None) -> str:
    if when is None:
        return "-"
    now = now or datetime.now(timezone.utc)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    seconds = int((now - when).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 604800:
        return f"{seconds // 86400}d ago"
    return f"{when:%b} {when.day}"


def is_valid_solana_address(address: str) -> bool:
    """Base58 alphabet, 32 to 44 characters."""
    return bool(SOLANA_ADDRESS_RE.match(address or ""))
