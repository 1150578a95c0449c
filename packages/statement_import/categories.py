"""Category book: the user-maintained income/expense categories and keywords.

This module holds small, validated CRUD operations over the category set the
matcher reads from. Validation mirrors what an editing UI would check early
but is enforced here authoritatively.

Exports
-------
- ``CategoryBook``: income and expense category lists with add/rename/delete
  and keyword add/remove operations.
- ``normalize_name(...)`` and ``validate_name(...)``: shared name helpers.
- ``category_book_from_mapping(...)`` / ``load_category_book(...)``: build a
  book from a JSON-shaped mapping or file.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from os import PathLike
from pathlib import Path
from typing import Any

from .logging_setup import get_logger
from .models import Category, CategoryType, new_category_id

logger = get_logger("statement_import.categories")

# ---------------------------
# Name normalization/validation
# ---------------------------


def normalize_name(name: str) -> str:
    """Return a trimmed, single-spaced representation of ``name``.

    Case is preserved; matching is case-insensitive downstream.
    """

    return " ".join(name.strip().split())


@dataclass(frozen=True, slots=True)
class NameValidation:
    ok: bool
    reason: str | None = None


def validate_name(name: str, *, min_len: int = 1, max_len: int = 64) -> NameValidation:
    """Validate a category name.

    Rules
    -----
    - Trim whitespace; enforce length bounds 1..64.
    - Any printable text is allowed, punctuation included ("Ocio (viajes)").
    """

    n = normalize_name(name)
    if len(n) < min_len:
        return NameValidation(False, "Name cannot be empty")
    if len(n) > max_len:
        return NameValidation(False, f"Name must be at most {max_len} characters")
    if not n.isprintable():
        return NameValidation(False, "Name cannot contain control characters")
    return NameValidation(True, None)


def _require_valid(name: str) -> str:
    n = normalize_name(name)
    v = validate_name(n)
    if not v.ok:
        raise ValueError(f"Invalid category name: {v.reason}")
    return n


# ---------------------------
# Category book
# ---------------------------


@dataclass(slots=True)
class CategoryBook:
    """Income and expense categories, each kept in insertion order."""

    income: list[Category] = field(default_factory=list)
    expense: list[Category] = field(default_factory=list)

    def _bucket(self, type_: CategoryType | str) -> list[Category]:
        t = CategoryType(type_)
        return self.income if t is CategoryType.INCOME else self.expense

    def _index(self, type_: CategoryType | str, category_id: str) -> int:
        for i, c in enumerate(self._bucket(type_)):
            if c.id == category_id:
                return i
        raise KeyError(category_id)

    def all(self) -> list[Category]:
        """Every category, income first then expense."""

        return [*self.income, *self.expense]

    def __iter__(self) -> Iterator[Category]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self.income) + len(self.expense)

    def names(self) -> list[str]:
        return [c.name for c in self.all()]

    def get(self, type_: CategoryType | str, category_id: str) -> Category:
        return self._bucket(type_)[self._index(type_, category_id)]

    def find_by_name(self, type_: CategoryType | str, name: str) -> Category | None:
        key = normalize_name(name).casefold()
        for c in self._bucket(type_):
            if c.name.casefold() == key:
                return c
        return None

    def add_category(
        self,
        type_: CategoryType | str,
        name: str,
        *,
        keywords: tuple[str, ...] | list[str] = (),
        category_id: str | None = None,
    ) -> tuple[Category, bool]:
        """Create a category unless one with the same name exists (case-insensitive).

        Returns ``(category, created)``. Invalid names raise ``ValueError``.
        """

        t = CategoryType(type_)
        n = _require_valid(name)
        existing = self.find_by_name(t, n)
        if existing is not None:
            return existing, False
        cat = Category(
            id=category_id or new_category_id(),
            name=n,
            keywords=_dedupe_keywords(keywords),
            type=t,
        )
        self._bucket(t).append(cat)
        logger.debug("category added type=%s name=%s", t.value, n)
        return cat, True

    def rename_category(self, type_: CategoryType | str, category_id: str, new_name: str) -> Category:
        n = _require_valid(new_name)
        bucket = self._bucket(type_)
        i = self._index(type_, category_id)
        clash = self.find_by_name(type_, n)
        if clash is not None and clash.id != category_id:
            raise ValueError(f"Category already exists: {clash.name}")
        bucket[i] = replace(bucket[i], name=n)
        return bucket[i]

    def delete_category(self, type_: CategoryType | str, category_id: str) -> Category:
        bucket = self._bucket(type_)
        return bucket.pop(self._index(type_, category_id))

    def add_keyword(self, type_: CategoryType | str, category_id: str, keyword: str) -> Category:
        """Attach ``keyword`` to a category; blank and duplicate keywords are ignored."""

        bucket = self._bucket(type_)
        i = self._index(type_, category_id)
        kw = keyword.strip()
        if not kw or kw in bucket[i].keywords:
            return bucket[i]
        bucket[i] = replace(bucket[i], keywords=(*bucket[i].keywords, kw))
        return bucket[i]

    def remove_keyword(self, type_: CategoryType | str, category_id: str, keyword: str) -> Category:
        bucket = self._bucket(type_)
        i = self._index(type_, category_id)
        bucket[i] = replace(bucket[i], keywords=tuple(k for k in bucket[i].keywords if k != keyword))
        return bucket[i]

    def to_mapping(self) -> dict[str, list[dict[str, Any]]]:
        return {
            t.value: [
                {"id": c.id, "name": c.name, "keywords": list(c.keywords)}
                for c in self._bucket(t)
            ]
            for t in CategoryType
        }


def _dedupe_keywords(keywords: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    out: list[str] = []
    for k in keywords:
        s = str(k).strip()
        if s and s not in out:
            out.append(s)
    return tuple(out)


def category_book_from_mapping(data: Mapping[str, Any]) -> CategoryBook:
    """Build a book from ``{"income": [...], "expense": [...]}``.

    Entries are either plain names or objects with ``name`` and optional
    ``keywords`` / ``id``.
    """

    book = CategoryBook()
    for t in CategoryType:
        for entry in data.get(t.value) or []:
            if isinstance(entry, str):
                book.add_category(t, entry)
                continue
            if not isinstance(entry, Mapping):
                raise ValueError(f"Invalid category entry under {t.value!r}: {entry!r}")
            book.add_category(
                t,
                str(entry.get("name") or ""),
                keywords=list(entry.get("keywords") or []),
                category_id=(str(entry["id"]) if entry.get("id") else None),
            )
    return book


def load_category_book(path: str | PathLike[str]) -> CategoryBook:
    """Read a category book from a UTF-8 JSON file."""

    with Path(path).open(encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, Mapping):
        raise ValueError(f"Category file must contain a JSON object: {path}")
    return category_book_from_mapping(data)


__all__ = [
    "CategoryBook",
    "NameValidation",
    "category_book_from_mapping",
    "load_category_book",
    "normalize_name",
    "validate_name",
]
