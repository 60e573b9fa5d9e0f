from decimal import Decimal

import pytest

from portfolio_history.units import clamp_decimals, format_units, parse_signed_raw


@pytest.mark.parametrize(
    "decimals,expected",
    [(None, 8), (0, 0), (6, 6), (18, 18), (-3, 0), (30, 18)],
)
def test_clamp_decimals(decimals, expected):
    assert clamp_decimals(decimals) == expected


def test_format_units_octas():
    assert format_units("12345678901", 8) == Decimal("123.45678901")


def test_format_units_zero_decimals():
    assert format_units(42, 0) == Decimal(42)


def test_format_units_strips_non_digits():
    assert format_units("-1,000,000", 6) == Decimal("1")


@pytest.mark.parametrize("value", [None, "", "0", "000", "abc"])
def test_format_units_empty_values_are_zero(value):
    assert format_units(value, 8) == Decimal(0)


def test_format_units_large_values_keep_precision():
    raw = "123456789012345678901234567"

    assert format_units(raw, 18) == Decimal("123456789.012345678901234567")


@pytest.mark.parametrize(
    "value,expected",
    [("100", 100), ("-100", -100), (" -5 ", -5), (None, 0), ("", 0), (7, 7)],
)
def test_parse_signed_raw(value, expected):
    assert parse_signed_raw(value) == expected
