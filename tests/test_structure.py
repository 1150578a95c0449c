import pytest

from statement_import.errors import EmptyGridError
from statement_import.ingest.grid import CellKind, to_grid
from statement_import.ingest.structure import (
    classify_header,
    detect_header_row,
    detect_structure,
    guess_column_mapping,
)


def test_title_row_is_skipped_and_columns_are_mapped():
    grid = to_grid(
        [
            ["Extracto de movimientos", None, None],
            ["Fecha", "Concepto", "Importe"],
            ["01/02/2024", "Mercadona", "-45,10"],
            ["02/02/2024", "Nómina", "1.500,00"],
        ]
    )
    s = detect_structure(grid)
    assert s.header_index == 1
    assert s.headers == ("Fecha", "Concepto", "Importe")
    assert (s.mapping.date, s.mapping.description, s.mapping.amount) == (
        "Fecha",
        "Concepto",
        "Importe",
    )
    assert len(s.data_rows) == 2
    assert s.preview(1)[0][1].text == "Mercadona"


def test_metadata_rows_before_header_and_blank_rows_are_dropped():
    grid = to_grid(
        [
            ["Cuenta", "ES12 3456"],
            ["Titular", "Ana"],
            [],
            ["F. Operación", "Fecha valor", "Descripción", "Importe (EUR)", "Saldo"],
            ["", "", "", "", ""],
            ["03/01/2024", "03/01/2024", "Bizum", "20,00", "100,00"],
        ]
    )
    s = detect_structure(grid)
    assert s.header_index == 3
    # "Fecha valor" is a date column, never the amount.
    assert s.mapping.date == "Fecha valor"
    assert s.mapping.description == "Descripción"
    assert s.mapping.amount == "Importe (EUR)"
    assert len(s.data_rows) == 1


def test_falls_back_to_row_zero_when_no_header_qualifies():
    grid = to_grid([["a", "b"], ["1", "2"]])
    assert detect_header_row(grid) == 0
    s = detect_structure(grid)
    assert not s.mapping.is_complete
    assert s.mapping.missing_fields() == ["date", "description", "amount"]


def test_scan_limit_is_respected():
    rows = [["titulo"]] * 25 + [["Fecha", "Concepto", "Importe"]]
    assert detect_header_row(to_grid(rows)) == 0
    assert detect_header_row(to_grid(rows), max_scan=30) == 25


def test_english_headers_and_first_match_wins():
    assert guess_column_mapping(["Date", "Description", "Amount", "Amount 2"]).amount == "Amount"
    assert classify_header("  VALOR ") == "amount"
    assert classify_header("Saldo") is None
    assert classify_header("") is None


def test_native_cells_keep_their_kind():
    grid = to_grid([["Fecha", "Concepto", "Importe"], [45000, "x", 12.5]])
    row = detect_structure(grid).data_rows[0]
    assert row[0].kind is CellKind.NUMBER
    assert row[2].text == "12.5"


def test_empty_grid_raises():
    with pytest.raises(EmptyGridError):
        detect_structure(())
