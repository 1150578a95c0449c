"""Save and resume a working session as a JSON snapshot file.

The snapshot holds the finalized ledger rows, the category book and the
selected number locale. Loading is lenient so older or hand-edited files
still open: a missing ``ignored`` flag reads as ``False``, a non-numeric
amount as ``0.0`` and a missing locale as ``eu``. Rows whose date cannot be
read are dropped with a warning.

Writes are atomic: the JSON goes to ``<path>.tmp`` and is then moved into
place with ``os.replace``.
"""

from __future__ import annotations

import contextlib
import json
import math
import os
from datetime import date
from os import PathLike
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .amounts import NumberLocale
from .categories import CategoryBook
from .dates import parse_date
from .logging_setup import get_logger
from .models import Category, CategoryType, Ledger, Transaction

logger = get_logger("statement_import.snapshot")

SCHEMA_VERSION: int = 1


class TransactionSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str
    date: str
    description: str = ""
    amount: float = 0.0
    category: str = ""
    ignored: bool = False

    @field_validator("amount", mode="before")
    @classmethod
    def _lenient_amount(cls, v: Any) -> float:
        try:
            f = float(v)
        except (TypeError, ValueError):
            return 0.0
        return f if math.isfinite(f) else 0.0

    @field_validator("ignored", mode="before")
    @classmethod
    def _lenient_ignored(cls, v: Any) -> bool:
        return bool(v)

    @field_validator("category", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)


class CategorySnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str
    name: str
    keywords: list[str] = Field(default_factory=list)


class CategoriesSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    income: list[CategorySnapshot] = Field(default_factory=list)
    expense: list[CategorySnapshot] = Field(default_factory=list)


class SessionSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    schema_version: int = SCHEMA_VERSION
    transactions: list[TransactionSnapshot] = Field(default_factory=list)
    categories: CategoriesSnapshot = Field(default_factory=CategoriesSnapshot)
    locale: NumberLocale = NumberLocale.EU

    @field_validator("locale", mode="before")
    @classmethod
    def _lenient_locale(cls, v: Any) -> NumberLocale:
        if not v:
            return NumberLocale.EU
        return NumberLocale.parse(str(v))

    @field_validator("transactions", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return v or []


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def _snapshot_from(ledger: Ledger, locale: NumberLocale) -> SessionSnapshot:
    def cats(items: list[Category]) -> list[CategorySnapshot]:
        return [CategorySnapshot(id=c.id, name=c.name, keywords=list(c.keywords)) for c in items]

    return SessionSnapshot(
        transactions=[
            TransactionSnapshot(
                id=t.id,
                date=t.date.isoformat(),
                description=t.description,
                amount=t.amount,
                category=t.category,
                ignored=t.ignored,
            )
            for t in ledger.transactions
        ],
        categories=CategoriesSnapshot(
            income=cats(ledger.categories.income), expense=cats(ledger.categories.expense)
        ),
        locale=locale,
    )


def _ledger_from(snap: SessionSnapshot) -> Ledger:
    book = CategoryBook()
    for type_, items in (
        (CategoryType.INCOME, snap.categories.income),
        (CategoryType.EXPENSE, snap.categories.expense),
    ):
        for c in items:
            try:
                book.add_category(type_, c.name, keywords=c.keywords, category_id=c.id)
            except ValueError as exc:
                logger.warning("snapshot category dropped: id=%s name=%r (%s)", c.id, c.name, exc)

    rows: list[Transaction] = []
    for t in snap.transactions:
        when: date | None = parse_date(t.date)
        if when is None:
            logger.warning("snapshot row dropped: unreadable date id=%s date=%r", t.id, t.date)
            continue
        rows.append(
            Transaction(
                id=t.id,
                date=when,
                description=t.description,
                amount=t.amount,
                category=t.category,
                ignored=t.ignored,
            )
        )
    return Ledger(transactions=rows, categories=book)


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def save_snapshot(path: str | PathLike[str], ledger: Ledger, locale: NumberLocale) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    snap = _snapshot_from(ledger, locale)
    try:
        tmp.write_text(
            json.dumps(snap.model_dump(mode="json"), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        os.replace(tmp, p)
    except Exception:
        with contextlib.suppress(FileNotFoundError):
            tmp.unlink()
        raise
    logger.info("snapshot saved path=%s transactions=%d", p, len(ledger.transactions))
    return p


def load_snapshot(path: str | PathLike[str]) -> tuple[Ledger, NumberLocale]:
    """Read a snapshot file; raises ``FileNotFoundError`` when it does not exist."""

    p = Path(path)
    snap = SessionSnapshot.model_validate_json(p.read_text(encoding="utf-8"))
    ledger = _ledger_from(snap)
    logger.info("snapshot loaded path=%s transactions=%d", p, len(ledger.transactions))
    return ledger, snap.locale


def has_snapshot(path: str | PathLike[str]) -> bool:
    return Path(path).is_file()


def clear_snapshot(path: str | PathLike[str]) -> bool:
    """Delete the snapshot file; returns whether one existed."""

    p = Path(path)
    try:
        p.unlink()
    except FileNotFoundError:
        return False
    logger.info("snapshot cleared path=%s", p)
    return True


__all__ = [
    "CategorySnapshot",
    "SessionSnapshot",
    "TransactionSnapshot",
    "clear_snapshot",
    "has_snapshot",
    "load_snapshot",
    "save_snapshot",
]
