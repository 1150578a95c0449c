"""Locale-insensitive text normalization shared by matching and detection."""

from __future__ import annotations

import unicodedata
from typing import Any


def normalize_text(value: Any) -> str:
    """Return ``value`` case-folded with diacritics stripped.

    ``"Pagínación"`` becomes ``"paginacion"``. ``None`` and empty input yield
    ``""``. The result is stable under repeated application.
    """

    if value is None:
        return ""
    s = str(value)
    if not s:
        return ""
    # Decompose before folding so compatibility forms ("№", "™") fold too;
    # the second pass decomposes anything casefold itself produced.
    folded = unicodedata.normalize("NFKD", s).casefold()
    decomposed = unicodedata.normalize("NFKD", folded)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def collapse_whitespace(value: Any) -> str:
    """Trim and collapse internal whitespace (tabs/newlines) to single spaces."""

    if value is None:
        return ""
    return " ".join(str(value).split())


__all__ = ["normalize_text", "collapse_whitespace"]
