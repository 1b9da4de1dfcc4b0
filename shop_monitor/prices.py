"""Region-aware price display."""

from __future__ import annotations

from typing import Mapping, Optional

BASE_KEY = "base_cost"
CURRENCY = ":ft-cookie:"
UNKNOWN = "Unknown"

REGION_LABELS = {
    "au": ":flag-au:",
    "ca": ":flag-ca:",
    "eu": ":flag-eu:",
    "in": ":flag-in:",
    "uk": ":flag-gb:",
    "us": ":flag-us:",
    "xx": ":earth_americas:",
}


def _fmt_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _same_price(a, b) -> bool:
    try:
        return float(a) == float(b)
    except (TypeError, ValueError):
        return a == b


def format_prices(prices: Optional[Mapping[str, float]]) -> str:
    """Collapse a region -> cost table into one display string.

    The base cost mirrors one of the regional prices and is only shown when
    the table has no regional prices at all.
    """
    if prices is None:
        return UNKNOWN

    regions = [(code, cost) for code, cost in prices.items() if code != BASE_KEY]
    if not regions:
        base = prices.get(BASE_KEY)
        return f"{_fmt_number(base)} {CURRENCY}" if base is not None else UNKNOWN

    first = regions[0][1]
    if all(_same_price(first, cost) for _, cost in regions[1:]):
        return f"{_fmt_number(first)} {CURRENCY}"

    return "\n".join(
        f"{REGION_LABELS.get(code, code.upper())}: {_fmt_number(cost)} {CURRENCY}"
        for code, cost in regions
    )


__all__ = ["format_prices", "REGION_LABELS", "BASE_KEY", "CURRENCY", "UNKNOWN"]
