import json

from typer.testing import CliRunner

from statement_import.cli import app
from statement_import.snapshot import load_snapshot

runner = CliRunner()

STATEMENT = (
    "Extracto de cuenta;;\n"
    "Fecha;Concepto;Importe\n"
    "01/02/2024;COMPRA MERCADONA;-45,10\n"
    "28/02/2024;NOMINA FEBRERO;1.500,00\n"
    ";Sin fecha;3\n"
)


def _write_statement(tmp_path):
    path = tmp_path / "extracto.csv"
    path.write_text(STATEMENT, encoding="utf-8")
    return path


def _write_categories(tmp_path):
    path = tmp_path / "categories.json"
    path.write_text(
        json.dumps(
            {
                "income": [{"name": "Nómina", "keywords": ["nomina"]}],
                "expense": [{"name": "Supermercado", "keywords": ["mercadona"]}],
            }
        ),
        encoding="utf-8",
    )
    return path


def test_detect_prints_header_and_mapping(tmp_path):
    path = _write_statement(tmp_path)
    result = runner.invoke(app, ["detect", "--file", str(path)])
    assert result.exit_code == 0, result.output
    assert "Header row: 2" in result.stdout
    assert "Headers: Fecha | Concepto | Importe" in result.stdout
    assert "date -> Fecha" in result.stdout
    assert "amount -> Importe" in result.stdout
    assert "Data rows: 3" in result.stdout


def test_detect_missing_file_exits_with_error(tmp_path):
    result = runner.invoke(app, ["detect", "--file", str(tmp_path / "nope.csv")])
    assert result.exit_code == 1
    assert "Error: File not found" in result.output


def test_import_then_summary_through_session_file(tmp_path):
    statement = _write_statement(tmp_path)
    categories = _write_categories(tmp_path)
    session_file = tmp_path / "session.json"

    result = runner.invoke(
        app,
        [
            "import",
            "--file",
            str(statement),
            "--categories",
            str(categories),
            "--session-file",
            str(session_file),
            "--yes",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "01/02/2024\t-45,10\tCOMPRA MERCADONA\tSupermercado" in result.stdout
    assert "Staged 2 of 3 row(s)." in result.stdout
    assert "1 with an invalid date" in result.stdout
    assert "Imported 2 transaction(s)." in result.stdout

    ledger, locale = load_snapshot(session_file)
    assert len(ledger.transactions) == 2
    assert [c.name for c in ledger.categories.expense] == ["Supermercado"]

    summary = runner.invoke(app, ["summary", "--session-file", str(session_file)])
    assert summary.exit_code == 0, summary.output
    assert "Transactions: 2" in summary.stdout
    assert "Income: 1.500,00" in summary.stdout
    assert "Expense: 45,10" in summary.stdout
    assert "Balance: 1.454,90" in summary.stdout
    assert "Supermercado" in summary.stdout


def test_import_declined_leaves_session_untouched(tmp_path):
    statement = _write_statement(tmp_path)
    session_file = tmp_path / "session.json"
    result = runner.invoke(
        app,
        ["import", "--file", str(statement), "--session-file", str(session_file)],
        input="n\n",
    )
    assert result.exit_code == 0, result.output
    assert "Import cancelled." in result.stdout
    assert not session_file.exists()


def test_import_with_unknown_column_override_fails(tmp_path):
    statement = _write_statement(tmp_path)
    result = runner.invoke(
        app, ["import", "--file", str(statement), "--amount-column", "Saldo", "--yes"]
    )
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_import_persists_and_summary_reads_database(tmp_path):
    statement = _write_statement(tmp_path)
    categories = _write_categories(tmp_path)
    from tests.helpers.db import bootstrap_sqlite_db

    url = bootstrap_sqlite_db(tmp_path / "db.sqlite")
    args = [
        "import",
        "--file",
        str(statement),
        "--categories",
        str(categories),
        "--persist",
        "--database-url",
        url,
        "--yes",
    ]
    first = runner.invoke(app, args)
    assert first.exit_code == 0, first.output
    assert "Persisted 2 new transaction(s)." in first.stdout

    second = runner.invoke(app, args)
    assert second.exit_code == 0, second.output
    assert "Persisted 0 new transaction(s)." in second.stdout

    summary = runner.invoke(app, ["summary", "--database-url", url])
    assert summary.exit_code == 0, summary.output
    assert "Transactions: 2" in summary.stdout
