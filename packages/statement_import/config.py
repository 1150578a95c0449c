"""Environment-driven settings for import batches.

Values are read from the process environment (the CLI loads a local ``.env``
first via ``python-dotenv`` without overriding variables already set).
Malformed values fall back to defaults rather than failing, matching how the
CLI treats its other optional environment overrides.

Variables
---------
- ``SI_DEFAULT_LOCALE``: ``eu`` (default) or ``us``.
- ``SI_DATE_ORDER``: ``day_first`` (default) or ``month_first``; tie-break for
  ambiguous ``D/M/Y`` dates.
- ``SI_HEADER_SCAN_ROWS``: rows scanned for the header (default 20).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Self

from .amounts import NumberLocale
from .dates import DateOrder
from .ingest.structure import HEADER_SCAN_ROWS
from .logging_setup import get_logger

logger = get_logger("statement_import.config")


@dataclass(frozen=True, slots=True)
class ImportSettings:
    locale: NumberLocale = NumberLocale.EU
    date_order: DateOrder = DateOrder.DAY_FIRST
    header_scan_rows: int = HEADER_SCAN_ROWS

    @classmethod
    def from_env(cls) -> Self:
        locale = NumberLocale.EU
        raw_locale = os.getenv("SI_DEFAULT_LOCALE")
        if raw_locale:
            try:
                locale = NumberLocale.parse(raw_locale)
            except ValueError:
                logger.warning("ignoring invalid SI_DEFAULT_LOCALE=%r", raw_locale)

        date_order = DateOrder.DAY_FIRST
        raw_order = os.getenv("SI_DATE_ORDER")
        if raw_order:
            try:
                date_order = DateOrder.parse(raw_order)
            except ValueError:
                logger.warning("ignoring invalid SI_DATE_ORDER=%r", raw_order)

        scan_rows = HEADER_SCAN_ROWS
        raw_scan = os.getenv("SI_HEADER_SCAN_ROWS")
        try:
            parsed = int(raw_scan) if raw_scan else None
        except ValueError:
            parsed = None
        if parsed is not None and parsed > 0:
            scan_rows = parsed

        return cls(locale=locale, date_order=date_order, header_scan_rows=scan_rows)


__all__ = ["ImportSettings"]
