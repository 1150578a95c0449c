# ruff: noqa: I001
"""Persistence integration for statement_import.

Functions here write finalized transactions and the category book to the
shared database owned by ``libs/db``. They rely on SQLAlchemy ORM models
defined in ``db.models.finance`` and a session provided by ``db.client``;
callers own the transaction (see :func:`db.client.session_scope`).

Scope:
- Insert transactions into ``si_transactions``, skipping rows whose
  fingerprint is already stored (re-importing a statement is a no-op).
- Replace the stored category book in ``si_categories``.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from db.models.finance import SiCategory, SiTransaction
from .categories import CategoryBook
from .logging_setup import get_logger
from .models import CategoryType, Transaction
from .normalizers import collapse_whitespace

logger = get_logger("statement_import.persistence")


def _to_decimal_2(value: float) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def compute_fingerprint(tx: Transaction, *, occurrence: int = 0) -> str:
    """Compute a stable SHA-256 fingerprint over canonical fields.

    Fields used: date (YYYY-MM-DD), amount (2dp string), description
    (whitespace-collapsed, lower-cased) and ``occurrence``, the 0-based
    position of this row among identical rows in the same save. The generated
    row id is not included, so re-importing a file yields the same prints.
    """

    payload = {
        "date": tx.date.isoformat(),
        "amount": f"{_to_decimal_2(tx.amount):.2f}",
        "description": collapse_whitespace(tx.description).lower(),
        "occurrence": occurrence,
    }
    data = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def save_transactions(session: Session, transactions: Iterable[Transaction]) -> int:
    """Insert transactions not already stored; returns the number inserted.

    A row whose fingerprint is stored is skipped. A row whose id is stored
    under a different fingerprint was edited after an earlier save and is
    updated in place.
    """

    seen: dict[str, int] = {}
    candidates: list[tuple[str, Transaction]] = []
    for tx in transactions:
        base = compute_fingerprint(tx)
        occurrence = seen.get(base, 0)
        seen[base] = occurrence + 1
        candidates.append((compute_fingerprint(tx, occurrence=occurrence), tx))

    if not candidates:
        return 0

    prints = [fp for fp, _ in candidates]
    existing_prints = set(
        session.scalars(
            select(SiTransaction.fingerprint_sha256).where(
                SiTransaction.fingerprint_sha256.in_(prints)
            )
        )
    )
    pending = [(fp, tx) for fp, tx in candidates if fp not in existing_prints]
    stored_by_id = {
        r.id: r
        for r in session.scalars(
            select(SiTransaction).where(SiTransaction.id.in_([tx.id for _, tx in pending]))
        )
    }

    inserted = 0
    updated = 0
    for fp, tx in pending:
        row = stored_by_id.get(tx.id)
        if row is None:
            session.add(
                SiTransaction(
                    id=tx.id,
                    fingerprint_sha256=fp,
                    date=tx.date,
                    description=tx.description,
                    amount=_to_decimal_2(tx.amount),
                    category=tx.category,
                    ignored=tx.ignored,
                )
            )
            inserted += 1
            continue
        row.fingerprint_sha256 = fp
        row.date = tx.date
        row.description = tx.description
        row.amount = _to_decimal_2(tx.amount)
        row.category = tx.category
        row.ignored = tx.ignored
        row.updated_at = func.now()
        updated += 1
    session.flush()
    logger.info(
        "transactions saved inserted=%d updated=%d skipped_existing=%d",
        inserted,
        updated,
        len(candidates) - len(pending),
    )
    return inserted


def load_transactions(session: Session) -> list[Transaction]:
    """Return every stored transaction, newest first."""

    stmt = select(SiTransaction).order_by(SiTransaction.date.desc(), SiTransaction.created_at.desc())
    return [
        Transaction(
            id=r.id,
            date=r.date,
            description=r.description,
            amount=float(r.amount),
            category=r.category or "",
            ignored=bool(r.ignored),
        )
        for r in session.scalars(stmt)
    ]


def save_categories(session: Session, book: CategoryBook) -> int:
    """Replace the stored category book with ``book``; returns rows written."""

    session.execute(delete(SiCategory))
    rows = [
        SiCategory(
            id=c.id, name=c.name, type=c.type.value, keywords=list(c.keywords), sort_order=i
        )
        for i, c in enumerate(book.all())
    ]
    session.add_all(rows)
    session.flush()
    logger.info("categories saved count=%d", len(rows))
    return len(rows)


def load_categories(session: Session) -> CategoryBook:
    book = CategoryBook()
    for r in session.scalars(select(SiCategory).order_by(SiCategory.sort_order, SiCategory.id)):
        book.add_category(CategoryType(r.type), r.name, keywords=list(r.keywords or []), category_id=r.id)
    return book


__all__ = [
    "compute_fingerprint",
    "load_categories",
    "load_transactions",
    "save_categories",
    "save_transactions",
]
