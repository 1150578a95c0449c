"""Import orchestration: detect structure, parse rows, categorize, stage, finalize.

An :class:`ImportSession` sequences one import:

1) ``load(grid)``: structure detection over the raw cell grid (header row,
   data rows, best-guess column mapping);
2) external confirmation: the caller may replace the mapping and pick the
   number locale (see :mod:`statement_import.term_ui` for the terminal UI);
3) ``process(...)``: every data row is parsed independently and either staged
   (auto-categorized against the ledger's categories) or skipped with a
   counted reason;
4) review: ``update_staged`` / ``delete_staged``;
5) ``finalize()`` promotes the whole staged batch into the ledger, or
   ``cancel()`` discards it.

Row policy
----------
A row is skipped, counting the first failing reason, when its description is
empty, its date is invalid, or its amount parses to zero. Skips never abort
the batch. A batch is refused with :class:`BatchImportError` (and nothing is
staged) when the mapping is incomplete or unknown, when there are no data
rows, or when no row survives the policy.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, fields, replace
from typing import Any, NoReturn

from ..amounts import NumberLocale, parse_amount
from ..categorization import CategoryMatcher
from ..config import ImportSettings
from ..dates import parse_date
from ..errors import BatchImportError, EmptyGridError
from ..ingest.grid import Grid, Row, cell_at
from ..ingest.structure import TableStructure, detect_structure
from ..logging_setup import get_logger
from ..models import ColumnMapping, Ledger, StagedTransaction, Transaction, new_transaction_id
from ..normalizers import collapse_whitespace

logger = get_logger("statement_import.workflows.import_flow")


@dataclass(frozen=True, slots=True)
class SkipCounts:
    """Rows excluded from a batch, by first failing reason."""

    empty_description: int = 0
    invalid_date: int = 0
    zero_amount: int = 0

    @property
    def total(self) -> int:
        return self.empty_description + self.invalid_date + self.zero_amount

    def as_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True, slots=True)
class ImportResult:
    staged: tuple[StagedTransaction, ...]
    skipped: SkipCounts
    total_rows: int
    locale: NumberLocale

    @property
    def staged_count(self) -> int:
        return len(self.staged)


# Fields a reviewer may edit on a staged row.
_EDITABLE_FIELDS = frozenset({"date", "description", "amount", "category", "ignored"})


def _parse_row(
    row: Row,
    positions: tuple[int, int, int],
    *,
    locale: NumberLocale,
    settings: ImportSettings,
) -> tuple[StagedTransaction | None, str | None]:
    """Parse one data row into a staged transaction or a skip reason."""

    i_date, i_desc, i_amount = positions
    description = collapse_whitespace(cell_at(row, i_desc).text)
    if not description:
        return None, "empty_description"
    when = parse_date(cell_at(row, i_date), order=settings.date_order)
    if when is None:
        return None, "invalid_date"
    amount = parse_amount(cell_at(row, i_amount), locale)
    if amount == 0:
        return None, "zero_amount"
    return (
        StagedTransaction(
            id=new_transaction_id("staged"),
            date=when,
            description=description,
            amount=amount,
        ),
        None,
    )


class ImportSession:
    """Stateful import of one sheet at a time into a :class:`Ledger`.

    Mutations of the loaded structure, the staged batch and the ledger are
    serialized by a lock so a finalize cannot interleave with a concurrent
    edit or a second batch.
    """

    def __init__(self, ledger: Ledger, *, settings: ImportSettings | None = None) -> None:
        self.ledger = ledger
        self.settings = settings or ImportSettings.from_env()
        self._structure: TableStructure | None = None
        self._staged: list[StagedTransaction] = []
        self._lock = threading.RLock()

    # ---- state views ---------------------------------------------------------

    @property
    def structure(self) -> TableStructure | None:
        return self._structure

    @property
    def staged(self) -> tuple[StagedTransaction, ...]:
        return tuple(self._staged)

    # ---- 1) load -------------------------------------------------------------

    def load(self, grid: Grid) -> TableStructure:
        """Detect the table structure of ``grid`` and keep it for processing."""

        structure = detect_structure(grid, max_scan=self.settings.header_scan_rows)
        if not structure.data_rows:
            raise EmptyGridError("No data rows were found below the header row.")
        with self._lock:
            self._structure = structure
        logger.info(
            "sheet loaded header_index=%d data_rows=%d mapping_complete=%s",
            structure.header_index,
            len(structure.data_rows),
            structure.mapping.is_complete,
        )
        return structure

    # ---- 3) process ----------------------------------------------------------

    def process(
        self,
        mapping: ColumnMapping | None = None,
        locale: NumberLocale | str | None = None,
    ) -> ImportResult:
        """Parse, categorize and stage every data row of the loaded sheet.

        ``mapping`` defaults to the detected guess and ``locale`` to the
        configured default. The locale is fixed for the whole batch.
        """

        with self._lock:
            structure = self._structure
            if structure is None or not structure.data_rows:
                self._refuse("There is no data to process. Load a file first.")
            mapping = mapping or structure.mapping
            if not mapping.is_complete:
                missing = ", ".join(mapping.missing_fields())
                self._refuse(
                    "Map all required columns (date, description and amount) "
                    f"before processing. Missing: {missing}."
                )
            try:
                positions = mapping.resolve(structure.headers)
            except KeyError as exc:
                self._refuse(f"Mapped column not found in the file: {exc.args[0]!r}.")
            batch_locale = NumberLocale.parse(locale) if locale is not None else self.settings.locale

            matcher = CategoryMatcher(self.ledger.categories)
            counts = {"empty_description": 0, "invalid_date": 0, "zero_amount": 0}
            parsed: list[StagedTransaction] = []
            for row in structure.data_rows:
                tx, reason = _parse_row(row, positions, locale=batch_locale, settings=self.settings)
                if tx is None:
                    counts[reason or "invalid_date"] += 1
                    continue
                parsed.append(replace(tx, category=matcher.match(tx.description)))

            skipped = SkipCounts(**counts)
            if not parsed:
                logger.warning(
                    "batch refused: no valid rows total=%d skipped=%s",
                    len(structure.data_rows),
                    skipped.as_dict(),
                )
                raise BatchImportError(
                    "No valid transactions were found in the file "
                    f"({skipped.total} row(s) skipped).",
                    skipped=skipped,
                )

            self._staged.extend(parsed)
            self._structure = None

        logger.info(
            "batch processed locale=%s total=%d staged=%d categorized=%d skipped=%s",
            batch_locale.value,
            len(structure.data_rows),
            len(parsed),
            sum(1 for t in parsed if t.category),
            skipped.as_dict(),
        )
        return ImportResult(
            staged=tuple(parsed),
            skipped=skipped,
            total_rows=len(structure.data_rows),
            locale=batch_locale,
        )

    def load_and_process(
        self,
        grid: Grid,
        mapping: ColumnMapping | None = None,
        locale: NumberLocale | str | None = None,
    ) -> ImportResult:
        self.load(grid)
        return self.process(mapping, locale)

    # ---- 4) review -----------------------------------------------------------

    def _staged_index(self, tx_id: str) -> int:
        for i, t in enumerate(self._staged):
            if t.id == tx_id:
                return i
        raise KeyError(tx_id)

    def update_staged(self, tx_id: str, **changes: Any) -> StagedTransaction:
        """Apply field-level edits (date, description, amount, category, ignored)."""

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"not editable: {', '.join(sorted(unknown))}")
        with self._lock:
            i = self._staged_index(tx_id)
            self._staged[i] = replace(self._staged[i], **changes)
            return self._staged[i]

    def delete_staged(self, tx_id: str) -> StagedTransaction:
        with self._lock:
            return self._staged.pop(self._staged_index(tx_id))

    def recategorize_staged(self) -> int:
        """Re-run matching on uncategorized staged rows; returns how many changed."""

        with self._lock:
            matcher = CategoryMatcher(self.ledger.categories)
            changed = 0
            for i, t in enumerate(self._staged):
                if t.category:
                    continue
                found = matcher.match(t.description)
                if found:
                    self._staged[i] = replace(t, category=found)
                    changed += 1
            return changed

    # ---- 5) finalize / cancel ------------------------------------------------

    def finalize(self) -> list[Transaction]:
        """Move the whole staged batch into the ledger.

        The ledger's list is replaced in one assignment, so observers see
        either none or all of the batch.
        """

        with self._lock:
            if not self._staged:
                raise BatchImportError("There are no staged transactions to finalize.")
            promoted = [t.promote() for t in self._staged]
            self.ledger.transactions = [*self.ledger.transactions, *promoted]
            self._staged = []
            self._structure = None
        logger.info("batch finalized count=%d ledger_size=%d", len(promoted), len(self.ledger.transactions))
        return promoted

    def cancel(self) -> int:
        """Discard the staged batch and any loaded sheet; returns rows discarded."""

        with self._lock:
            discarded = len(self._staged)
            self._staged = []
            self._structure = None
        logger.info("batch cancelled discarded=%d", discarded)
        return discarded

    # ---- helpers -------------------------------------------------------------

    def _refuse(self, message: str) -> NoReturn:
        logger.warning("batch refused: %s", message)
        raise BatchImportError(message)


def import_grid(
    ledger: Ledger,
    grid: Grid,
    *,
    mapping: ColumnMapping | None = None,
    locale: NumberLocale | str | None = None,
    settings: ImportSettings | None = None,
    finalize: bool = True,
) -> ImportResult:
    """One-shot helper: load, process and (by default) finalize a grid."""

    session = ImportSession(ledger, settings=settings)
    result = session.load_and_process(grid, mapping, locale)
    if finalize:
        session.finalize()
    return result


__all__ = ["ImportResult", "ImportSession", "SkipCounts", "import_grid"]
