"""Ledger operations for the ``statement_import`` package.

Everything here works on finalized :class:`~statement_import.models.Transaction`
rows held by a :class:`~statement_import.models.Ledger`. Rows are immutable,
so edits replace the row in place in the ledger's list and return the new row.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date
from typing import Any

from .categorization import CategoryMatcher
from .logging_setup import get_logger
from .models import Category, Ledger, Transaction, new_transaction_id
from .normalizers import collapse_whitespace

logger = get_logger("statement_import.api")

# Category filter values with a special meaning.
FILTER_ALL = "all"
FILTER_UNCATEGORIZED = "uncategorized"

# Fields that may be edited on a ledger row.
_EDITABLE_FIELDS = frozenset({"date", "description", "amount", "category", "ignored"})


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


def add_manual_transaction(
    ledger: Ledger,
    *,
    date: date,
    description: str,
    amount: float,
    category: str = "",
) -> Transaction:
    """Create a hand-entered transaction and put it at the top of the ledger.

    Raises ``ValueError`` for an empty description or a zero amount, the same
    rows an import would skip.
    """

    text = collapse_whitespace(description)
    if not text:
        raise ValueError("A description is required.")
    if float(amount) == 0:
        raise ValueError("The amount must be non-zero.")
    tx = Transaction(
        id=new_transaction_id("manual"),
        date=date,
        description=text,
        amount=float(amount),
        category=category,
        ignored=False,
    )
    ledger.transactions = [tx, *ledger.transactions]
    logger.info("manual transaction added id=%s", tx.id)
    return tx


def update_transaction(ledger: Ledger, tx_id: str, **changes: Any) -> Transaction:
    """Apply field-level edits to one ledger row; unknown ids raise ``KeyError``."""

    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise TypeError(f"not editable: {', '.join(sorted(unknown))}")
    i = ledger.find(tx_id)
    ledger.transactions[i] = replace(ledger.transactions[i], **changes)
    return ledger.transactions[i]


def toggle_ignored(ledger: Ledger, tx_id: str) -> Transaction:
    i = ledger.find(tx_id)
    current = ledger.transactions[i]
    return update_transaction(ledger, tx_id, ignored=not current.ignored)


def auto_categorize(
    transactions: Iterable[Transaction], categories: Iterable[Category]
) -> tuple[list[Transaction], int]:
    """Match uncategorized rows against ``categories``.

    Rows that already carry a category are never overwritten.

    Returns
    -------
    (rows, changed)
        The full list in input order and the number of rows that gained a
        category.
    """

    matcher = CategoryMatcher(categories)
    out: list[Transaction] = []
    changed = 0
    for t in transactions:
        if not t.category:
            found = matcher.match(t.description)
            if found:
                t = replace(t, category=found)
                changed += 1
        out.append(t)
    logger.info("auto-categorized %d of %d transactions", changed, len(out))
    return out, changed


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Summary:
    """Totals over non-ignored rows.

    ``total_expense`` is a positive magnitude and ``by_category`` lists
    categorized expenses, largest first.
    """

    total_income: float
    total_expense: float
    balance: float
    by_category: tuple[tuple[str, float], ...]
    count: int


def summarize(transactions: Iterable[Transaction], *, top: int = 6) -> Summary:
    income = 0.0
    expense = 0.0
    count = 0
    per_category: dict[str, float] = {}
    for t in transactions:
        if t.ignored:
            continue
        count += 1
        if t.amount > 0:
            income += t.amount
        elif t.amount < 0:
            expense += abs(t.amount)
            if t.category:
                per_category[t.category] = per_category.get(t.category, 0.0) + abs(t.amount)
    ranked = sorted(per_category.items(), key=lambda kv: kv[1], reverse=True)
    return Summary(
        total_income=round(income, 2),
        total_expense=round(expense, 2),
        balance=round(income - expense, 2),
        by_category=tuple((name, round(total, 2)) for name, total in ranked[:top]),
        count=count,
    )


def filter_transactions(
    transactions: Iterable[Transaction],
    *,
    category: str | None = None,
    start: date | None = None,
    end: date | None = None,
) -> list[Transaction]:
    """Filter by category and an inclusive date range.

    ``category`` of ``None`` or ``"all"`` disables the category filter and
    ``"uncategorized"`` selects rows without one.
    """

    out: list[Transaction] = []
    for t in transactions:
        if start is not None and t.date < start:
            continue
        if end is not None and t.date > end:
            continue
        if category not in (None, FILTER_ALL):
            if category == FILTER_UNCATEGORIZED:
                if t.category:
                    continue
            elif t.category != category:
                continue
        out.append(t)
    return out


def sort_by_date(transactions: Sequence[Transaction], *, reverse: bool = True) -> list[Transaction]:
    """Newest first by default; ties keep their input order."""

    return sorted(transactions, key=lambda t: t.date, reverse=reverse)


__all__ = [
    "FILTER_ALL",
    "FILTER_UNCATEGORIZED",
    "Summary",
    "add_manual_transaction",
    "auto_categorize",
    "filter_transactions",
    "sort_by_date",
    "summarize",
    "toggle_ignored",
    "update_transaction",
]
