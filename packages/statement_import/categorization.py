"""Keyword-based category matching for transaction descriptions.

Every category contributes its name plus its keywords as candidates. Candidates
are tried longest first so the most specific keyword wins, and each is tried
with a naive singular variant to absorb simple plurals ("restaurantes" also
matches "restaurant"). Matching runs in two passes:

1. whole-word: the variant must appear bounded by word boundaries in the
   normalized description;
2. substring: only when pass 1 found nothing for any candidate, plain
   containment is accepted.

The first hit in priority order wins; no hit leaves the transaction
uncategorized (``""``).
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from .models import Category
from .normalizers import normalize_text

# Plural stripping only applies to keywords longer than this.
_MIN_PLURAL_LEN = 3


def keyword_variations(keyword: str) -> tuple[str, ...]:
    """Return the normalized keyword and its naive singular form, de-duplicated."""

    normalized = normalize_text(keyword)
    forms = [normalized]
    if normalized.endswith("es") and len(normalized) > _MIN_PLURAL_LEN:
        forms.append(normalized[:-2])
    elif normalized.endswith("s") and len(normalized) > _MIN_PLURAL_LEN:
        forms.append(normalized[:-1])
    return tuple(dict.fromkeys(f for f in forms if f))


@dataclass(frozen=True, slots=True)
class _Candidate:
    keyword: str
    category: str
    variations: tuple[str, ...]
    patterns: tuple[re.Pattern[str], ...]


class CategoryMatcher:
    """Precomputed, priority-ordered keyword candidates for one batch.

    Build once per import batch (or per re-categorization run) and call
    :meth:`match` for every description.
    """

    def __init__(self, categories: Iterable[Category]) -> None:
        flat: list[tuple[str, str]] = [
            (kw, c.name) for c in categories for kw in c.effective_keywords
        ]
        # Stable sort: equal lengths keep category/keyword order.
        flat.sort(key=lambda pair: len(pair[0] or ""), reverse=True)

        candidates: list[_Candidate] = []
        for kw, cat in flat:
            if not kw:
                continue
            variations = keyword_variations(kw)
            if not variations:
                continue
            candidates.append(
                _Candidate(
                    keyword=kw,
                    category=cat,
                    variations=variations,
                    patterns=tuple(re.compile(rf"\b{re.escape(v)}\b") for v in variations),
                )
            )
        self._candidates: tuple[_Candidate, ...] = tuple(candidates)

    def __len__(self) -> int:
        return len(self._candidates)

    def explain(self, description: str) -> tuple[str, str, str] | None:
        """Return ``(category, keyword, pass_name)`` for the winning candidate."""

        text = normalize_text(description)
        if not text:
            return None
        for cand in self._candidates:
            for pattern in cand.patterns:
                if pattern.search(text):
                    return cand.category, cand.keyword, "word"
        for cand in self._candidates:
            for variation in cand.variations:
                if variation in text:
                    return cand.category, cand.keyword, "substring"
        return None

    def match(self, description: str) -> str:
        hit = self.explain(description)
        return hit[0] if hit else ""


def match_category(description: str, categories: Iterable[Category]) -> str:
    """Convenience wrapper building a one-off :class:`CategoryMatcher`."""

    return CategoryMatcher(categories).match(description)


__all__ = ["CategoryMatcher", "keyword_variations", "match_category"]
