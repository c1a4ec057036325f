"""
Tests for currency formatting helpers.
"""

import pytest

from finance_tracker.utils.currency import format_amount, format_currency


@pytest.mark.parametrize(
    "amount, expected",
    [
        (1234.5, "$1,234.50"),
        (0, "$0.00"),
        ("99.999", "$100.00"),
        (0.125, "$0.13"),
        (-12, "-$12.00"),
        (1000000, "$1,000,000.00"),
    ],
)
def test_format_currency_usd(amount, expected):
    assert format_currency(amount) == expected


def test_format_currency_known_symbol():
    assert format_currency(10, "eur") == "€10.00"


def test_format_currency_unknown_code_uses_prefix():
    assert format_currency(10, "GTQ") == "GTQ 10.00"
    assert format_currency(-5.5, "GTQ") == "-GTQ 5.50"


def test_format_amount():
    assert format_amount(12.3) == "12.30"
    assert format_amount("7") == "7.00"


@pytest.mark.parametrize("bad", ["abc", None, "NaN", float("inf")])
def test_invalid_amounts_raise(bad):
    with pytest.raises(ValueError):
        format_currency(bad)
