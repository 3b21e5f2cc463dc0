"""
Currency and percentage formatting helpers.

Leaf utilities shared by the calculation services. Formatting rounds the way
a spreadsheet export does (half away from zero on the exact binary value), so
the strings match what consultants see in the workbook.
"""

import math
import re
from decimal import Context, Decimal, ROUND_HALF_UP


# Magnitude suffixes, largest first
_SUFFIX_MULTIPLIERS = {
    "B": 1_000_000_000,
    "M": 1_000_000,
    "K": 1_000,
}

_LEADING_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

_DECIMAL_CONTEXT = Context(prec=60)

# Fixed-point rendering switches to exponent form at this magnitude
_EXPONENT_THRESHOLD = 1e21


def _to_fixed(value: float, digits: int) -> str:
    """
    Render value with a fixed number of decimals, ties rounded away from zero.

    Magnitudes of 1e21 and above render in exponent form ("1e+70").
    """
    if abs(value) >= _EXPONENT_THRESHOLD:
        return repr(value)
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_DECIMAL_CONTEXT)
    return str(rounded)


def format_currency(value: float) -> str:
    """
    Format a dollar amount with a magnitude suffix.

    Examples:
        2_500_000 -> "$2.5M"
        150_000   -> "$150K"
        500       -> "$500"
        -2_500_000 -> "$-2.5M"

    Non-finite values render as "$0".
    """
    if not math.isfinite(value):
        return "$0"

    if abs(value) >= 1_000_000:
        return f"${_to_fixed(value / 1_000_000, 1)}M"
    if abs(value) >= 1_000:
        return f"${_to_fixed(value / 1_000, 0)}K"
    return f"${_to_fixed(value, 0)}"


def format_percent(value: float) -> str:
    """Format a fraction as a percentage with one decimal (0.125 -> "12.5%")."""
    if not math.isfinite(value):
        return "0.0%"
    return f"{_to_fixed(value * 100, 1)}%"


def parse_currency_string(value: str) -> float:
    """
    Parse a formatted currency string back into a number.

    Strips "$", commas and whitespace, then applies a trailing K/M/B
    multiplier. Anything without a leading number parses to 0.0.
    """
    if not value:
        return 0.0

    clean = re.sub(r"[,$\s]", "", str(value))
    multiplier = 1
    if clean and clean[-1].upper() in _SUFFIX_MULTIPLIERS:
        multiplier = _SUFFIX_MULTIPLIERS[clean[-1].upper()]
        clean = clean[:-1]

    match = _LEADING_NUMBER.match(clean)
    if not match:
        return 0.0

    return float(match.group(0)) * multiplier
