import math
from decimal import Decimal

import pytest

from statement_import.amounts import NumberLocale, format_amount, parse_amount, parse_amount_text

EU = NumberLocale.EU
US = NumberLocale.US


def test_european_grouping_and_decimal_comma():
    assert parse_amount("1.234,56", EU) == 1234.56


def test_american_grouping_and_decimal_point():
    assert parse_amount("1,234.56", US) == 1234.56


def test_european_without_thousands():
    assert parse_amount("1234,56", EU) == 1234.56


def test_european_thousands_only():
    assert parse_amount("1.234", EU) == 1234


def test_negative_with_minus_sign():
    assert parse_amount("-45,00", EU) == -45.0


@pytest.mark.parametrize("raw", ["", "   ", "abc", "n/a", "--", None])
def test_empty_or_garbage_is_zero(raw):
    assert parse_amount(raw, EU) == 0.0


def test_currency_symbols_and_spaces_are_ignored():
    assert parse_amount("1 234,56 €", EU) == 1234.56
    assert parse_amount("$1,234.56", US) == 1234.56
    assert parse_amount("EUR -12,30", EU) == -12.3


def test_accounting_parentheses_and_trailing_minus_are_negative():
    assert parse_amount("(12,00)", EU) == -12.0
    assert parse_amount("45,00-", EU) == -45.0


def test_repeated_separator_is_grouping():
    assert parse_amount("1.234.567", EU) == 1234567
    assert parse_amount("1,234,567", US) == 1234567
    assert parse_amount("1.234.567,89", EU) == 1234567.89


def test_three_decimals_stay_decimals_outside_grouping_pattern():
    # Same text, different locale: the dot is a decimal point in US style.
    assert parse_amount("1.234", US) == 1.234
    # A zero head cannot be a thousands group.
    assert parse_amount("0.500", EU) == 0.5


def test_single_separator_with_two_decimals_is_decimal_in_both_locales():
    assert parse_amount("12.50", EU) == 12.5
    assert parse_amount("12,50", US) == 12.5


def test_native_numbers_pass_through():
    assert parse_amount(12.5, EU) == 12.5
    assert parse_amount(-7, US) == -7.0
    assert parse_amount(float("nan"), EU) == 0.0
    assert parse_amount(float("inf"), EU) == 0.0


def test_locale_accepts_aliases():
    assert NumberLocale.parse("eur") is EU
    assert NumberLocale.parse(" US ") is US
    for alias in ("eu", "EUR", "european"):
        assert NumberLocale.parse(alias) is EU
    for alias in ("us", "usa", "American"):
        assert NumberLocale.parse(alias) is US
    for unknown in ("jp", "es", "en"):
        with pytest.raises(ValueError):
            NumberLocale.parse(unknown)
    assert parse_amount("1.234,56", "eur") == 1234.56


@pytest.mark.parametrize("x", [0.5, 12.34, -1234.5, 1000.0, 987654.01])
def test_formatted_amounts_parse_back(x):
    for loc in NumberLocale:
        assert math.isclose(parse_amount(format_amount(x, loc), loc), x)


@pytest.mark.parametrize(
    ("s", "loc"),
    [
        ("1.234,56", EU),
        ("1,234.56", US),
        ("-45,00", EU),
        ("12.5", US),
        ("0.00001", US),
        ("0,00001", EU),
        ("12345678901234567890", US),
        ("-98765432109876543210", EU),
    ],
)
def test_reparsing_the_rendered_value_is_stable(s, loc):
    v = parse_amount(s, loc)
    assert v != 0
    assert parse_amount(str(v), loc) == v


def test_exponent_numerals():
    assert parse_amount("1e-05", EU) == 1e-05
    assert parse_amount("-1.5e+16", US) == -1.5e16
    assert parse_amount("1e400", US) == 0.0


def test_overflowing_values_yield_zero():
    assert parse_amount(10**400, EU) == 0.0
    assert parse_amount(Decimal("1e400"), EU) == 0.0
    assert parse_amount("9" * 400, US) == 0.0
    assert parse_amount_text("9" * 400 + ",5", EU) == 0.0


def test_format_amount():
    assert format_amount(-1234.5, EU) == "-1.234,50"
    assert format_amount(1234.5, US) == "1,234.50"
    assert format_amount(-0.001, EU) == "0,00"
