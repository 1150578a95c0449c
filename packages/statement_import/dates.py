"""Date parsing for spreadsheet cells with day/month disambiguation.

Cells may hold native dates, spreadsheet serial numbers or text in ISO,
day/month/year or month-name forms. Unlike amounts, dates are disambiguated
per value rather than by a batch-wide locale because exports frequently mix
formats. When a ``D/M/Y`` value cannot be disambiguated from the value alone,
the :class:`DateOrder` tie-break decides (day-first by default).

The parser never raises: anything unreadable or calendar-impossible yields
:data:`INVALID_DATE` (``None``).
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Any, Final

from .ingest.grid import Cell, CellKind
from .normalizers import normalize_text

INVALID_DATE: Final = None
INVALID_DATE_LABEL: Final = "Invalid Date"


class DateOrder(StrEnum):
    DAY_FIRST = "day_first"
    MONTH_FIRST = "month_first"

    @classmethod
    def parse(cls, text: str | DateOrder) -> DateOrder:
        if isinstance(text, DateOrder):
            return text
        key = str(text).strip().lower().replace("-", "_")
        if key in {"day_first", "dmy", "eu", "day"}:
            return cls.DAY_FIRST
        if key in {"month_first", "mdy", "us", "month"}:
            return cls.MONTH_FIRST
        raise ValueError(f"unknown date order: {text!r} (expected day_first or month_first)")


# 1900 date system. Serial 60 is the fictitious 1900-02-29 carried over from
# Lotus 1-2-3; serials after it are offset by one day.
_SERIAL_EPOCH_BEFORE_LEAP_BUG: Final = date(1899, 12, 31)
_SERIAL_EPOCH: Final = date(1899, 12, 30)
_SERIAL_PHANTOM_LEAP_DAY: Final = 60
_SERIAL_MIN: Final = 1
_SERIAL_MAX: Final = 99_999

# Optional trailing time part: "2023-03-15T10:00:00", "15/03/2023 10:00".
_TIME_TAIL = r"(?:[T\s].*)?"
_ISO_RE: Final = re.compile(rf"^(\d{{4}})[-/.](\d{{1,2}})[-/.](\d{{1,2}}){_TIME_TAIL}$")
_DMY_RE: Final = re.compile(rf"^(\d{{1,2}})[-/.](\d{{1,2}})[-/.](\d{{4}}|\d{{2}}){_TIME_TAIL}$")
# "15 mar 2023", "15-Mar-23", "15 de marzo de 2023"
_DAY_MONTH_NAME_RE: Final = re.compile(
    r"^(\d{1,2})[\s\-/.]+(?:de\s+)?([a-z]+)\.?[\s\-/.,]+(?:de\s+)?(\d{4}|\d{2})$"
)
# "March 15, 2023", "mar 15 2023"
_MONTH_NAME_DAY_RE: Final = re.compile(r"^([a-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})$")

_MONTH_NAMES: Final[dict[str, int]] = {
    # Spanish
    "enero": 1, "febrero": 2, "marzo": 3, "abril": 4, "mayo": 5, "junio": 6,
    "julio": 7, "agosto": 8, "septiembre": 9, "setiembre": 9, "octubre": 10,
    "noviembre": 11, "diciembre": 12,
    "ene": 1, "abr": 4, "ago": 8, "dic": 12,
    # English
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11,
    "december": 12,
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "jun": 6, "jul": 7, "aug": 8,
    "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
}


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return INVALID_DATE


def _expand_year(raw: str) -> int:
    year = int(raw)
    return 2000 + year if len(raw) == 2 else year


def from_serial(serial: float) -> date | None:
    """Convert a 1900-system spreadsheet serial number to a calendar date."""

    if not math.isfinite(serial):
        return INVALID_DATE
    days = math.floor(serial)
    if days < _SERIAL_MIN or days > _SERIAL_MAX:
        return INVALID_DATE
    if days == _SERIAL_PHANTOM_LEAP_DAY:
        return INVALID_DATE
    if days < _SERIAL_PHANTOM_LEAP_DAY:
        return _SERIAL_EPOCH_BEFORE_LEAP_BUG + timedelta(days=days)
    return _SERIAL_EPOCH + timedelta(days=days)


def _resolve_day_month(first: int, second: int, order: DateOrder) -> tuple[int, int] | None:
    """Return ``(day, month)`` for the two leading components of a D/M/Y value."""

    if first > 12 and second > 12:
        return None
    if first > 12:
        return first, second
    if second > 12:
        return second, first
    if order is DateOrder.MONTH_FIRST:
        return second, first
    return first, second


def _parse_text(text: str, order: DateOrder) -> date | None:
    s = text.strip()
    if not s:
        return INVALID_DATE

    m = _ISO_RE.match(s)
    if m:
        return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _DMY_RE.match(s)
    if m:
        resolved = _resolve_day_month(int(m.group(1)), int(m.group(2)), order)
        if resolved is None:
            return INVALID_DATE
        day, month = resolved
        return _safe_date(_expand_year(m.group(3)), month, day)

    folded = normalize_text(s)
    m = _DAY_MONTH_NAME_RE.match(folded)
    if m and m.group(2) in _MONTH_NAMES:
        return _safe_date(_expand_year(m.group(3)), _MONTH_NAMES[m.group(2)], int(m.group(1)))

    m = _MONTH_NAME_DAY_RE.match(folded)
    if m and m.group(1) in _MONTH_NAMES:
        return _safe_date(int(m.group(3)), _MONTH_NAMES[m.group(1)], int(m.group(2)))

    return INVALID_DATE


def parse_date(value: Any, *, order: DateOrder = DateOrder.DAY_FIRST) -> date | None:
    """Parse a raw date cell into a ``date`` or :data:`INVALID_DATE`.

    Priority: native dates, spreadsheet serials, ISO text, ``D/M/Y`` text,
    month-name text. Native datetimes keep their wall-clock date (no timezone
    reinterpretation).
    """

    cell = Cell.of(value)
    if cell.kind is CellKind.DATE:
        v = cell.value
        return v.date() if isinstance(v, datetime) else v
    if cell.kind is CellKind.NUMBER:
        try:
            serial = float(cell.value)
        except (OverflowError, ValueError):
            return INVALID_DATE
        return from_serial(serial)
    if cell.kind is CellKind.TEXT:
        return _parse_text(cell.value, order)
    return INVALID_DATE


def format_date(value: date | None) -> str:
    """Render ``DD/MM/YYYY`` or the invalid label."""

    if value is None:
        return INVALID_DATE_LABEL
    return value.strftime("%d/%m/%Y")


__all__ = [
    "DateOrder",
    "INVALID_DATE",
    "INVALID_DATE_LABEL",
    "format_date",
    "from_serial",
    "parse_date",
]
