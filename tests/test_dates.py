from datetime import date, datetime
from decimal import Decimal

import pytest

from statement_import.dates import DateOrder, format_date, from_serial, parse_date
from statement_import.ingest.grid import Cell


def test_serial_45000_is_2023_03_15():
    assert parse_date(45000) == date(2023, 3, 15)
    assert parse_date(45000.75) == date(2023, 3, 15)


def test_serials_around_the_phantom_leap_day():
    assert from_serial(1) == date(1900, 1, 1)
    assert from_serial(59) == date(1900, 2, 28)
    assert from_serial(60) is None
    assert from_serial(61) == date(1900, 3, 1)
    assert from_serial(0) is None
    assert from_serial(float("nan")) is None


def test_day_above_twelve_forces_day_first_in_either_order():
    for order in DateOrder:
        assert parse_date("31/12/2023", order=order) == date(2023, 12, 31)
        assert parse_date("12/31/2023", order=order) == date(2023, 12, 31)


def test_ambiguous_dates_follow_the_tie_break():
    assert parse_date("03/04/2024") == date(2024, 4, 3)
    assert parse_date("03/04/2024", order=DateOrder.MONTH_FIRST) == date(2024, 3, 4)


def test_iso_and_short_year_forms():
    assert parse_date("2023-03-15") == date(2023, 3, 15)
    assert parse_date("2023-03-15T10:30:00") == date(2023, 3, 15)
    assert parse_date("15-03-23") == date(2023, 3, 15)
    assert parse_date("15.03.2023 08:00") == date(2023, 3, 15)


def test_month_names():
    assert parse_date("15 de marzo de 2023") == date(2023, 3, 15)
    assert parse_date("15-Mar-23") == date(2023, 3, 15)
    assert parse_date("1 Dic 2022") == date(2022, 12, 1)
    assert parse_date("March 15, 2023") == date(2023, 3, 15)


def test_native_dates():
    assert parse_date(date(2024, 1, 2)) == date(2024, 1, 2)
    assert parse_date(datetime(2024, 1, 2, 23, 59)) == date(2024, 1, 2)
    assert parse_date(Cell.of(date(2024, 1, 2))) == date(2024, 1, 2)


@pytest.mark.parametrize(
    "raw",
    ["", None, "hello", "31/04/2023", "13/13/2023", "2023-02-30", "32 enero 2023", True],
)
def test_invalid_values_yield_none(raw):
    assert parse_date(raw) is None


def test_repeated_parsing_is_stable():
    assert parse_date("07/08/2021") == parse_date("07/08/2021")


def test_format_date():
    assert format_date(date(2023, 3, 5)) == "05/03/2023"
    assert format_date(None) == "Invalid Date"


def test_date_order_parse():
    assert DateOrder.parse("month-first") is DateOrder.MONTH_FIRST
    assert DateOrder.parse("dmy") is DateOrder.DAY_FIRST
    with pytest.raises(ValueError):
        DateOrder.parse("sideways")


def test_out_of_range_native_numbers_yield_none():
    assert parse_date(10**400) is None
    assert parse_date(Decimal("1e400")) is None
    assert parse_date(Decimal("NaN")) is None
    assert parse_date(float("inf")) is None
