"""Data models for ``statement_import``.

Transactions and categories are frozen dataclasses; field-level updates go
through :func:`dataclasses.replace` so every collection holds immutable rows
and a batch can be swapped in or out as a whole.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .categories import CategoryBook

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class CategoryType(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True, slots=True)
class Category:
    """A user-defined category.

    The category's name always acts as an implicit keyword; it is not stored
    in ``keywords`` but combined at match time (see
    :attr:`effective_keywords`).
    """

    id: str
    name: str
    keywords: tuple[str, ...] = ()
    type: CategoryType = CategoryType.EXPENSE

    @property
    def effective_keywords(self) -> tuple[str, ...]:
        return (self.name, *self.keywords)


def new_category_id() -> str:
    return f"cat-{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """A ledger row.

    ``amount`` is signed: positive is an inflow, negative an outflow.
    ``category`` is an assigned label (``""`` means uncategorized), not a
    reference with integrity guarantees. ``ignored`` rows stay in the ledger
    for audit but are excluded from totals.
    """

    id: str
    date: date
    description: str
    amount: float
    category: str = ""
    ignored: bool = False


@dataclass(frozen=True, slots=True)
class StagedTransaction(Transaction):
    """A parsed row held for review before it joins the ledger."""

    def promote(self) -> Transaction:
        return Transaction(
            id=self.id,
            date=self.date,
            description=self.description,
            amount=self.amount,
            category=self.category,
            ignored=self.ignored,
        )


def new_transaction_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Column mapping
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Header labels chosen for the date, description and amount fields.

    An empty string marks a field that has not been mapped yet.
    """

    date: str = ""
    description: str = ""
    amount: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.date and self.description and self.amount)

    def missing_fields(self) -> list[str]:
        return [name for name in ("date", "description", "amount") if not getattr(self, name)]

    def resolve(self, headers: Sequence[str]) -> tuple[int, int, int]:
        """Return the column indexes of ``(date, description, amount)``.

        Raises ``KeyError`` naming the first label absent from ``headers``.
        Duplicate labels resolve to their first occurrence.
        """

        positions: list[int] = []
        for label in (self.date, self.description, self.amount):
            try:
                positions.append(list(headers).index(label))
            except ValueError:
                raise KeyError(label) from None
        return positions[0], positions[1], positions[2]


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Ledger:
    """The permanent transaction set plus the category book it is matched against.

    Owned by the host application; the import flow only appends finalized
    batches to ``transactions`` and reads ``categories``.
    """

    transactions: list[Transaction] = field(default_factory=list)
    categories: CategoryBook = field(default_factory=lambda: _new_book())

    def find(self, tx_id: str) -> int:
        for i, t in enumerate(self.transactions):
            if t.id == tx_id:
                return i
        raise KeyError(tx_id)


def _new_book() -> CategoryBook:
    from .categories import CategoryBook

    return CategoryBook()


__all__ = [
    "Category",
    "CategoryType",
    "ColumnMapping",
    "Ledger",
    "StagedTransaction",
    "Transaction",
    "new_category_id",
    "new_transaction_id",
]
