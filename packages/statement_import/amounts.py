"""Locale-aware amount parsing for loosely formatted bank exports.

Amounts arrive either as native spreadsheet numbers or as free-form text such
as ``"1.234,56 €"``, ``"-45,00"``, ``"$1,234.56"`` or ``"(12.00)"``. Parsing is
lenient by policy: anything that cannot be read as a number becomes ``0.0``
so one bad cell never aborts a whole file. Deciding whether a zero means "bad
cell" is left to the import orchestrator's row policy.
"""

from __future__ import annotations

import math
import re
from enum import StrEnum
from typing import Any

from .ingest.grid import Cell, CellKind


class NumberLocale(StrEnum):
    """Regional numeral convention selected once per import batch."""

    EU = "eu"
    US = "us"

    @property
    def decimal_sep(self) -> str:
        return "," if self is NumberLocale.EU else "."

    @property
    def thousands_sep(self) -> str:
        return "." if self is NumberLocale.EU else ","

    @classmethod
    def parse(cls, text: str | NumberLocale) -> NumberLocale:
        if isinstance(text, NumberLocale):
            return text
        key = str(text).strip().lower()
        try:
            return _LOCALE_ALIASES[key]
        except KeyError:
            raise ValueError(
                f"unknown number locale: {text!r} (expected one of: eu, us)"
            ) from None


_LOCALE_ALIASES: dict[str, NumberLocale] = {
    "eu": NumberLocale.EU,
    "eur": NumberLocale.EU,
    "european": NumberLocale.EU,
    "us": NumberLocale.US,
    "usa": NumberLocale.US,
    "american": NumberLocale.US,
}

# Everything except digits, separators, minus and accounting parentheses.
_STRIP_RE = re.compile(r"[^\d.,\-()]")
_CANONICAL_RE = re.compile(r"^\d*\.?\d*$")
# Python float rendering such as "1e-05" or "-1.5e+16".
_EXPONENT_RE = re.compile(r"^[+-]?\d+(?:\.\d+)?[eE][+-]?\d+$")


def _split_sign(cleaned: str) -> tuple[bool, str]:
    negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        negative = True
        cleaned = cleaned[1:-1]
    cleaned = cleaned.replace("(", "").replace(")", "")
    if cleaned.startswith("-"):
        negative = True
        cleaned = cleaned[1:]
    elif cleaned.endswith("-"):
        # Trailing minus as printed by some ledger exports ("45,00-").
        negative = True
        cleaned = cleaned[:-1]
    return negative, cleaned


def _resolve_single_separator(magnitude: str, sep: str, locale: NumberLocale) -> str:
    if magnitude.count(sep) > 1:
        # Repeated separator can only be digit grouping: 1.234.567
        return magnitude.replace(sep, "")
    head, _, tail = magnitude.partition(sep)
    looks_grouped = (
        len(tail) == 3
        and sep == locale.thousands_sep
        and 1 <= len(head) <= 3
        and head.strip("0") != ""
    )
    if looks_grouped:
        return head + tail
    return f"{head}.{tail}"


def _canonicalize(magnitude: str, locale: NumberLocale) -> str:
    has_dot = "." in magnitude
    has_comma = "," in magnitude
    if has_dot and has_comma:
        if locale is NumberLocale.EU:
            return magnitude.replace(".", "").replace(",", ".")
        return magnitude.replace(",", "")
    if has_dot:
        return _resolve_single_separator(magnitude, ".", locale)
    if has_comma:
        return _resolve_single_separator(magnitude, ",", locale)
    return magnitude


def parse_amount_text(text: str, locale: NumberLocale = NumberLocale.EU) -> float:
    stripped = (text or "").strip()
    if _EXPONENT_RE.match(stripped):
        value = float(stripped)
        return value if math.isfinite(value) and value != 0 else 0.0
    cleaned = _STRIP_RE.sub("", stripped)
    if not cleaned:
        return 0.0
    negative, magnitude = _split_sign(cleaned)
    canonical = _canonicalize(magnitude, locale)
    if not canonical or not _CANONICAL_RE.match(canonical) or not any(
        ch.isdigit() for ch in canonical
    ):
        return 0.0
    value = float(canonical)
    if value == 0 or not math.isfinite(value):
        return 0.0
    return -value if negative else value


def parse_amount(value: Any, locale: NumberLocale = NumberLocale.EU) -> float:
    """Convert a raw amount cell into a signed float under ``locale``.

    Never raises; unreadable input (empty cells, dates, garbage text, NaN)
    yields ``0.0``.
    """

    cell = Cell.of(value)
    if cell.kind is CellKind.NUMBER:
        try:
            f = float(cell.value)
        except (OverflowError, ValueError):
            return 0.0
        return f if math.isfinite(f) else 0.0
    if cell.kind is CellKind.TEXT:
        return parse_amount_text(cell.value, NumberLocale.parse(locale))
    return 0.0


def format_amount(amount: float, locale: NumberLocale = NumberLocale.EU, *, decimals: int = 2) -> str:
    """Format ``amount`` with grouping in the locale's convention.

    ``format_amount(-1234.5, NumberLocale.EU) == "-1.234,50"``.
    """

    us = f"{abs(amount):,.{decimals}f}"
    if locale is NumberLocale.EU:
        us = us.replace(",", "\0").replace(".", ",").replace("\0", ".")
    sign = "-" if amount < 0 and round(abs(amount), decimals) != 0 else ""
    return sign + us


__all__ = ["NumberLocale", "format_amount", "parse_amount", "parse_amount_text"]
