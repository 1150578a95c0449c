"""Header-row and column detection for transaction tables in noisy sheets.

Bank exports often prepend title or account-metadata rows, so the header is
located by scoring the first rows against a small vocabulary of column labels
instead of assuming row 0. Once found, each header label is classified into
the date, description or amount field by synonym containment, producing a
best-guess :class:`~statement_import.models.ColumnMapping` that a confirmation
step may override.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from ..errors import EmptyGridError
from ..logging_setup import get_logger
from ..models import ColumnMapping
from ..normalizers import normalize_text
from .grid import Grid, Row, row_is_blank

logger = get_logger("statement_import.ingest.structure")

HEADER_SCAN_ROWS: Final = 20
HEADER_MIN_SCORE: Final = 2

# Field -> label fragments, checked in this order. Fragments are compared
# against case-folded, accent-stripped header text.
COLUMN_SYNONYMS: Final[dict[str, tuple[str, ...]]] = {
    "date": ("fecha", "date"),
    "description": ("descrip", "concepto", "detalle", "movimiento"),
    "amount": ("importe", "valor", "cantidad", "amount", "monto"),
}

# Vocabulary used to score candidate header rows.
HEADER_TOKENS: Final[tuple[str, ...]] = tuple(
    dict.fromkeys(tok for group in COLUMN_SYNONYMS.values() for tok in group)
)


def _row_labels(row: Row) -> list[str]:
    return [c.text for c in row]


def header_score(row: Row) -> int:
    """Number of cells in ``row`` containing at least one header token."""

    score = 0
    for cell in row:
        text = normalize_text(cell.text).strip()
        if text and any(tok in text for tok in HEADER_TOKENS):
            score += 1
    return score


def detect_header_row(
    grid: Grid,
    *,
    max_scan: int = HEADER_SCAN_ROWS,
    min_score: int = HEADER_MIN_SCORE,
) -> int:
    """Return the index of the first row scoring ``min_score`` or more.

    Only the first ``max_scan`` rows are considered; ``0`` when none qualifies.
    """

    for i, row in enumerate(grid[:max_scan]):
        if header_score(row) >= min_score:
            return i
    return 0


def classify_header(label: str) -> str | None:
    """Return the field a header label most likely holds, if any."""

    text = normalize_text(label).strip()
    if not text:
        return None
    for field_name, fragments in COLUMN_SYNONYMS.items():
        if any(frag in text for frag in fragments):
            return field_name
    return None


def guess_column_mapping(headers: Sequence[str]) -> ColumnMapping:
    """Best-guess mapping: the first header classified to each field wins.

    A header is classified to a single field, so a "Fecha valor" column is a
    date candidate and never taken as the amount.
    """

    chosen: dict[str, str] = {}
    for label in headers:
        field_name = classify_header(label)
        if field_name is not None and field_name not in chosen:
            chosen[field_name] = label
    return ColumnMapping(
        date=chosen.get("date", ""),
        description=chosen.get("description", ""),
        amount=chosen.get("amount", ""),
    )


@dataclass(frozen=True, slots=True)
class TableStructure:
    """Result of structure detection over a raw grid."""

    header_index: int
    headers: tuple[str, ...]
    data_rows: tuple[Row, ...]
    mapping: ColumnMapping

    def preview(self, n: int = 3) -> tuple[Row, ...]:
        return self.data_rows[:n]

    def with_mapping(self, mapping: ColumnMapping) -> TableStructure:
        return TableStructure(self.header_index, self.headers, self.data_rows, mapping)


def detect_structure(
    grid: Grid,
    *,
    max_scan: int = HEADER_SCAN_ROWS,
    min_score: int = HEADER_MIN_SCORE,
) -> TableStructure:
    """Locate the header row, collect non-blank data rows and guess the mapping.

    Raises :class:`~statement_import.errors.EmptyGridError` for a grid without
    rows.
    """

    if not grid:
        raise EmptyGridError("The file is empty: no rows were found.")

    header_index = detect_header_row(grid, max_scan=max_scan, min_score=min_score)
    headers = tuple(_row_labels(grid[header_index]))
    data_rows = tuple(r for r in grid[header_index + 1 :] if r and not row_is_blank(r))
    mapping = guess_column_mapping(headers)

    logger.debug(
        "structure detected header_index=%d headers=%s data_rows=%d mapping=%s",
        header_index,
        list(headers),
        len(data_rows),
        mapping,
    )
    return TableStructure(
        header_index=header_index,
        headers=headers,
        data_rows=data_rows,
        mapping=mapping,
    )


__all__ = [
    "COLUMN_SYNONYMS",
    "HEADER_MIN_SCORE",
    "HEADER_SCAN_ROWS",
    "HEADER_TOKENS",
    "TableStructure",
    "classify_header",
    "detect_header_row",
    "detect_structure",
    "guess_column_mapping",
    "header_score",
]
