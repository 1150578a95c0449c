# ruff: noqa: I001
"""CLI for the ``statement_import`` package.

This module exposes callable command handlers (``cmd_detect``, ``cmd_import``,
``cmd_summary``) and a Typer-based console interface. Environment variables
(``DATABASE_URL``, ``SI_*`` import settings, ``STATEMENT_IMPORT_LOG_LEVEL``)
are loaded from a local ``.env`` using ``python-dotenv`` before delegating to
command logic. Business logic lives in ``statement_import.workflows`` and
``statement_import.api``.

Handlers print ``Error: ...`` to stderr and return ``1`` on failure; the Typer
commands turn the handler's return value into the process exit code.
"""

from __future__ import annotations

import csv
import sys
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .amounts import NumberLocale, format_amount
from .config import ImportSettings
from .dates import DateOrder, format_date
from .errors import BatchImportError
from .logging_setup import configure_logging
from .models import ColumnMapping, Ledger


# ---- Small module-level helpers used by CLI commands -------------------------


def _err(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _print_skips(skipped) -> None:
    if skipped is None or skipped.total == 0:
        return
    print(
        f"Skipped {skipped.total} row(s): "
        f"{skipped.empty_description} without description, "
        f"{skipped.invalid_date} with an invalid date, "
        f"{skipped.zero_amount} with a zero amount."
    )


def _mapping_with_overrides(
    guess: ColumnMapping,
    *,
    date_column: str | None,
    description_column: str | None,
    amount_column: str | None,
) -> ColumnMapping:
    return ColumnMapping(
        date=date_column or guess.date,
        description=description_column or guess.description,
        amount=amount_column or guess.amount,
    )


def _load_ledger(
    *,
    session_file: Path | None,
    categories_path: Path | None,
    persist: bool,
    database_url: str | None,
) -> tuple[Ledger, NumberLocale | None]:
    """Resume from the snapshot (if any), then merge a categories file or DB book."""

    from .categories import load_category_book

    ledger = Ledger()
    saved_locale: NumberLocale | None = None
    if session_file is not None and session_file.is_file():
        from .snapshot import load_snapshot

        ledger, saved_locale = load_snapshot(session_file)

    extra = None
    if categories_path is not None:
        extra = load_category_book(categories_path)
    elif persist and len(ledger.categories) == 0:
        from db.client import session_scope
        from .persistence import load_categories

        with session_scope(database_url=database_url) as session:
            extra = load_categories(session)

    if extra is not None:
        for cat in extra:
            ledger.categories.add_category(cat.type, cat.name, keywords=cat.keywords, category_id=cat.id)
    return ledger, saved_locale


# ---- Command handlers ----------------------------------------------------------


def cmd_detect(file_path: str, *, preview_rows: int = 3) -> int:
    """Print the detected header row, headers, guessed mapping and a preview."""

    from .ingest.readers import read_grid
    from .ingest.structure import detect_structure

    settings = ImportSettings.from_env()
    try:
        grid = read_grid(file_path)
        structure = detect_structure(grid, max_scan=settings.header_scan_rows)
    except FileNotFoundError:
        return _err(f"File not found: {file_path}")
    except (BatchImportError, ValueError, csv.Error) as e:
        return _err(str(e))

    print(f"Header row: {structure.header_index + 1}")
    print("Headers: " + " | ".join(structure.headers))
    m = structure.mapping
    print(f"date -> {m.date or '?'}")
    print(f"description -> {m.description or '?'}")
    print(f"amount -> {m.amount or '?'}")
    print(f"Data rows: {len(structure.data_rows)}")
    for row in structure.preview(preview_rows):
        print("  " + " | ".join(c.text for c in row))
    return 0


def cmd_import(
    file_path: str,
    *,
    categories_path: Path | None = None,
    locale: str | None = None,
    date_column: str | None = None,
    description_column: str | None = None,
    amount_column: str | None = None,
    month_first: bool = False,
    interactive: bool = False,
    assume_yes: bool = False,
    persist: bool = False,
    database_url: str | None = None,
    session_file: Path | None = None,
) -> int:
    """Import one statement file into the session ledger.

    Steps: read -> detect structure -> (optional confirmation UI) -> process
    -> print staged rows and skip counts -> finalize -> save snapshot and/or
    persist.
    """

    from .ingest.readers import read_grid
    from .workflows.import_flow import ImportSession

    settings = ImportSettings.from_env()
    if month_first:
        settings = replace(settings, date_order=DateOrder.MONTH_FIRST)

    try:
        ledger, saved_locale = _load_ledger(
            session_file=session_file,
            categories_path=categories_path,
            persist=persist,
            database_url=database_url,
        )
        batch_locale = NumberLocale.parse(locale) if locale else (saved_locale or settings.locale)
        grid = read_grid(file_path)
    except FileNotFoundError as e:
        return _err(str(e) if str(e) else f"File not found: {file_path}")
    except (ValueError, csv.Error, OSError) as e:
        return _err(str(e))
    except Exception as e:
        return _err(f"failed to load categories: {e}")

    session = ImportSession(ledger, settings=settings)
    try:
        structure = session.load(grid)
        mapping = _mapping_with_overrides(
            structure.mapping,
            date_column=date_column,
            description_column=description_column,
            amount_column=amount_column,
        )
        if interactive:
            from .term_ui import confirm_mapping

            mapping, batch_locale = confirm_mapping(
                structure.with_mapping(mapping), locale=batch_locale
            )
        result = session.process(mapping, batch_locale)
    except BatchImportError as e:
        _print_skips(e.skipped)
        return _err(e.message)
    except (KeyboardInterrupt, EOFError):
        session.cancel()
        print("Import cancelled.")
        return 1

    for t in result.staged:
        print(
            f"{format_date(t.date)}\t{format_amount(t.amount, result.locale)}\t"
            f"{t.description}\t{t.category or '-'}"
        )
    print(f"Staged {result.staged_count} of {result.total_rows} row(s).")
    _print_skips(result.skipped)

    if not assume_yes and not typer.confirm(
        f"Add {result.staged_count} transaction(s) to the ledger?", default=True
    ):
        session.cancel()
        print("Import cancelled.")
        return 0

    promoted = session.finalize()
    print(f"Imported {len(promoted)} transaction(s).")

    if session_file is not None:
        from .snapshot import save_snapshot

        try:
            save_snapshot(session_file, ledger, result.locale)
        except OSError as e:
            return _err(f"failed to save session: {e}")

    if persist:
        try:
            from db.client import session_scope
            from .persistence import save_categories, save_transactions

            with session_scope(database_url=database_url) as db_session:
                save_categories(db_session, ledger.categories)
                inserted = save_transactions(db_session, promoted)
        except Exception as e:
            return _err(f"persistence failed: {e}")
        print(f"Persisted {inserted} new transaction(s).")

    return 0


def cmd_summary(
    *,
    session_file: Path | None = None,
    database_url: str | None = None,
    top: int = 6,
) -> int:
    """Print income, expense, balance and the top expense categories."""

    from .api import summarize

    if session_file is None and database_url is None:
        return _err("Provide --session-file or --database-url.")

    locale = NumberLocale.EU
    try:
        if session_file is not None:
            from .snapshot import load_snapshot

            ledger, locale = load_snapshot(session_file)
            transactions = ledger.transactions
        else:
            from db.client import session_scope
            from .persistence import load_transactions

            with session_scope(database_url=database_url) as session:
                transactions = load_transactions(session)
            locale = ImportSettings.from_env().locale
    except FileNotFoundError:
        return _err(f"Session file not found: {session_file}")
    except Exception as e:
        return _err(f"failed to load transactions: {e}")

    s = summarize(transactions, top=top)
    print(f"Transactions: {s.count}")
    print(f"Income: {format_amount(s.total_income, locale)}")
    print(f"Expense: {format_amount(s.total_expense, locale)}")
    print(f"Balance: {format_amount(s.balance, locale)}")
    if s.by_category:
        print("Top expense categories:")
        for name, total in s.by_category:
            print(f"  {name}\t{format_amount(total, locale)}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bank statement exports (CSV/XLSX) into a categorized ledger. "
        "Loads settings from a local .env before running."
    ),
)


# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect these when used as default values below.
FILE_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--file",
    help="Path to a .csv, .txt, .xlsx or .xlsm statement export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler will report nice errors
)
SESSION_FILE_OPTION: OptionInfo = typer.Option(
    None, "--session-file", help="JSON session snapshot to resume from and save to."
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    None, help="Override DATABASE_URL (falls back to env var)."
)


@app.command("detect")
def detect_cmd(
    file_path: Annotated[Path, FILE_OPTION],
    *,
    preview: int = typer.Option(3, help="Number of data rows to preview."),
) -> None:
    """Show the detected header row, column mapping and a preview."""

    raise typer.Exit(cmd_detect(str(file_path), preview_rows=preview))


@app.command("import")
def import_cmd(
    file_path: Annotated[Path, FILE_OPTION],
    *,
    categories: Path | None = typer.Option(
        None, "--categories", help="JSON file with {'income': [...], 'expense': [...]} categories."
    ),
    locale: str | None = typer.Option(
        None, help="Number format: eu (1.234,56) or us (1,234.56). Defaults to SI_DEFAULT_LOCALE."
    ),
    date_column: str | None = typer.Option(None, help="Header label of the date column."),
    description_column: str | None = typer.Option(
        None, help="Header label of the description column."
    ),
    amount_column: str | None = typer.Option(None, help="Header label of the amount column."),
    month_first: bool = typer.Option(
        False, help="Read ambiguous dates like 03/04/2024 as month/day."
    ),
    interactive: bool = typer.Option(
        False, help="Confirm the column mapping and number format interactively."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Finalize without asking."),
    persist: bool = typer.Option(False, help="Persist categories and transactions to the database."),
    database_url: str | None = DATABASE_URL_OPTION,
    session_file: Path | None = SESSION_FILE_OPTION,
) -> None:
    """Import a statement: detect, parse, categorize, review and finalize."""

    raise typer.Exit(
        cmd_import(
            str(file_path),
            categories_path=categories,
            locale=locale,
            date_column=date_column,
            description_column=description_column,
            amount_column=amount_column,
            month_first=month_first,
            interactive=interactive,
            assume_yes=yes,
            persist=persist,
            database_url=database_url,
            session_file=session_file,
        )
    )


@app.command("summary")
def summary_cmd(
    *,
    session_file: Path | None = SESSION_FILE_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
    top: int = typer.Option(6, help="Number of expense categories to list."),
) -> None:
    """Print totals for a saved session or the database."""

    raise typer.Exit(cmd_summary(session_file=session_file, database_url=database_url, top=top))


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    # Running as a module: `python -m statement_import.cli`
    app()
