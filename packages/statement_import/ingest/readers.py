"""Read CSV text or spreadsheet files into a raw :data:`~.grid.Grid`.

No header handling happens here; the whole sheet is returned row by row so
structure detection can look past title and metadata rows.

- ``.csv``/``.txt``: decoded with the first encoding that works among
  ``utf-8-sig``, ``cp1252`` and ``latin-1``; the delimiter is sniffed among
  ``, ; \\t |`` (comma when sniffing fails).
- ``.xlsx``/``.xlsm``: first worksheet via ``openpyxl`` with cached formula
  values; native numbers and datetimes are kept as typed cells.
"""

from __future__ import annotations

import csv
import io
from os import PathLike
from pathlib import Path

from ..logging_setup import get_logger
from .grid import Grid, to_grid

logger = get_logger("statement_import.ingest.readers")

CSV_ENCODINGS: tuple[str, ...] = ("utf-8-sig", "cp1252", "latin-1")
CSV_DELIMITERS = ",;\t|"
_SNIFF_BYTES = 8192

CSV_SUFFIXES = frozenset({".csv", ".txt"})
XLSX_SUFFIXES = frozenset({".xlsx", ".xlsm"})


def _sniff_delimiter(sample: str) -> str:
    try:
        return csv.Sniffer().sniff(sample, delimiters=CSV_DELIMITERS).delimiter
    except csv.Error:
        return ","


def read_csv_text(text: str, *, delimiter: str | None = None) -> Grid:
    """Parse CSV ``text`` into a grid; every value becomes a text cell."""

    if delimiter is None:
        delimiter = _sniff_delimiter(text[:_SNIFF_BYTES])
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    return to_grid(reader)


def _decode(data: bytes, source: Path) -> str:
    for encoding in CSV_ENCODINGS:
        try:
            text = data.decode(encoding)
        except UnicodeDecodeError:
            continue
        logger.debug("decoded %s with %s", source, encoding)
        return text
    # latin-1 maps every byte, so this is only reached with a custom list.
    raise ValueError(f"Could not decode {source} with any of: {', '.join(CSV_ENCODINGS)}")


def _read_xlsx(path: Path) -> Grid:
    import openpyxl

    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        return to_grid(ws.iter_rows(values_only=True))
    finally:
        wb.close()


def read_grid(path: str | PathLike[str]) -> Grid:
    """Read a statement file into a grid, dispatching on its extension.

    Raises ``FileNotFoundError`` for a missing path and ``ValueError`` for an
    unsupported extension.
    """

    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"File not found: {p}")
    suffix = p.suffix.lower()
    if suffix in CSV_SUFFIXES:
        grid = read_csv_text(_decode(p.read_bytes(), p))
    elif suffix in XLSX_SUFFIXES:
        grid = _read_xlsx(p)
    else:
        raise ValueError(f"Unsupported file type {suffix or '(none)'!r}; expected .csv, .txt, .xlsx or .xlsm")
    logger.info("read %s rows=%d", p.name, len(grid))
    return grid


__all__ = ["CSV_ENCODINGS", "read_csv_text", "read_grid"]
