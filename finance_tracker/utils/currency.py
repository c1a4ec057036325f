"""
Currency formatting helpers used by dashboard responses.

Amounts arrive from PostgREST as numbers or numeric strings; both are accepted.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

Number = Union[int, float, str, Decimal]

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}

_CENTS = Decimal("0.01")


def _to_decimal(amount: Number) -> Decimal:
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_amount(amount: Number) -> str:
    """Format an amount with exactly two decimals, e.g. 12.3 -> "12.30"."""
    return f"{_to_decimal(amount):.2f}"


def format_currency(amount: Number, currency: str = "USD") -> str:
    """
    Format an amount for display, e.g. 1234.5 -> "$1,234.50".

    Negative amounts put the sign before the symbol ("-$12.00"). Currencies
    without a known symbol are prefixed with their ISO code ("GTQ 10.00").
    """
    value = _to_decimal(amount)
    code = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(code)
    sign = "-" if value < 0 else ""
    digits = f"{abs(value):,.2f}"
    if symbol:
        return f"{sign}{symbol}{digits}"
    return f"{sign}{code} {digits}"
