"""Raw cell grid: the tagged cell type fed into structure detection and parsing.

Sheet readers produce heterogeneously-typed values (strings from CSV, native
numbers and datetimes from spreadsheets, ``None`` for blanks). Each value is
wrapped in a :class:`Cell` tagged with its :class:`CellKind` so parser dispatch
is explicit rather than duck-typed.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any


class CellKind(StrEnum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    EMPTY = "empty"


@dataclass(frozen=True, slots=True)
class Cell:
    """A single grid value with its kind.

    ``value`` is a ``str`` for text, ``int | float | Decimal`` for numbers, a
    ``date`` (or ``datetime``) for dates and ``None`` for empty cells.
    """

    kind: CellKind
    value: Any = None

    @classmethod
    def of(cls, raw: Any) -> Cell:
        if isinstance(raw, Cell):
            return raw
        if raw is None:
            return EMPTY_CELL
        if isinstance(raw, str):
            return cls(CellKind.TEXT, raw) if raw.strip() else EMPTY_CELL
        # bool is an int subclass; a flag is not an amount.
        if isinstance(raw, bool):
            return cls(CellKind.TEXT, str(raw))
        if isinstance(raw, (int, float, Decimal)):
            return cls(CellKind.NUMBER, raw)
        if isinstance(raw, (date, datetime)):
            return cls(CellKind.DATE, raw)
        return cls(CellKind.TEXT, str(raw))

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY

    @property
    def text(self) -> str:
        """Label rendering used for headers and descriptions."""

        if self.kind is CellKind.EMPTY:
            return ""
        if self.kind is CellKind.DATE:
            return self.value.isoformat()
        if self.kind is CellKind.NUMBER:
            v = self.value
            if isinstance(v, float) and math.isfinite(v) and v.is_integer():
                return str(int(v))
            return str(v)
        return str(self.value)


EMPTY_CELL = Cell(CellKind.EMPTY, None)

type Row = tuple[Cell, ...]
type Grid = tuple[Row, ...]


def to_row(values: Iterable[Any]) -> Row:
    return tuple(Cell.of(v) for v in values)


def to_grid(rows: Iterable[Iterable[Any]]) -> Grid:
    """Wrap nested raw values into an immutable grid of cells."""

    return tuple(to_row(r) for r in rows)


def row_is_blank(row: Sequence[Cell]) -> bool:
    return all(c.is_empty for c in row)


def cell_at(row: Sequence[Cell], index: int) -> Cell:
    """Return ``row[index]`` or an empty cell for short (ragged) rows."""

    if 0 <= index < len(row):
        return row[index]
    return EMPTY_CELL


__all__ = [
    "Cell",
    "CellKind",
    "EMPTY_CELL",
    "Grid",
    "Row",
    "cell_at",
    "row_is_blank",
    "to_grid",
    "to_row",
]
