"""Tiny terminal UI helpers (prompt_toolkit-based).

Interactive confirmation of the detected column mapping and the number
locale before a batch is processed. Kept separate from the import flow so
the prompts can be driven from a pipe in tests.
"""

from __future__ import annotations

from collections.abc import Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.validation import ValidationError, Validator

from .amounts import NumberLocale
from .ingest.structure import TableStructure
from .models import ColumnMapping

_FIELD_LABELS = {
    "date": "Date column",
    "description": "Description column",
    "amount": "Amount column",
}


class _ChoiceValidator(Validator):
    def __init__(self, allowed_lower: set[str], message: str) -> None:
        self._allowed_lower = allowed_lower
        self._message = message

    def validate(self, document) -> None:
        if document.text.strip().lower() not in self._allowed_lower:
            raise ValidationError(message=self._message)


def _session_like(session: PromptSession | None) -> PromptSession:
    if session is None:
        return PromptSession()
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
    )


def select_column(
    headers: Sequence[str],
    *,
    field: str,
    default: str = "",
    session: PromptSession | None = None,
) -> str:
    """Prompt for the header label holding ``field``.

    The detected guess is pre-filled so Enter accepts it. Input is matched
    case-insensitively and returned as the exact header label; anything that
    is not a header is rejected inline.
    """

    words = [h for h in dict.fromkeys(headers) if h]
    canonical = {w.strip().lower(): w for w in words}
    completer = WordCompleter(words, ignore_case=True, match_middle=True, sentence=True)
    sess = _session_like(session)

    label = _FIELD_LABELS.get(field, field)
    result = sess.prompt(
        f"{label} (Enter to accept): ",
        default=default if default in words else "",
        completer=completer,
        validator=_ChoiceValidator(set(canonical), "Pick one of the file's column headers."),
        validate_while_typing=False,
    )
    return canonical[result.strip().lower()]


def select_locale(
    *,
    default: NumberLocale = NumberLocale.EU,
    session: PromptSession | None = None,
) -> NumberLocale:
    """Prompt for the number format: ``eu`` (1.234,56) or ``us`` (1,234.56)."""

    words = [loc.value for loc in NumberLocale]
    completer = WordCompleter(words, ignore_case=True, sentence=True)

    class _LocaleValidator(Validator):
        def validate(self, document) -> None:
            try:
                NumberLocale.parse(document.text)
            except ValueError:
                raise ValidationError(message="Enter 'eu' (1.234,56) or 'us' (1,234.56).") from None

    sess = _session_like(session)
    result = sess.prompt(
        "Number format [eu = 1.234,56 | us = 1,234.56]: ",
        default=default.value,
        completer=completer,
        validator=_LocaleValidator(),
        validate_while_typing=False,
    )
    return NumberLocale.parse(result)


def confirm_mapping(
    structure: TableStructure,
    *,
    locale: NumberLocale = NumberLocale.EU,
    session: PromptSession | None = None,
) -> tuple[ColumnMapping, NumberLocale]:
    """Walk the user through the three required columns, then the locale."""

    guess = structure.mapping
    mapping = ColumnMapping(
        date=select_column(structure.headers, field="date", default=guess.date, session=session),
        description=select_column(
            structure.headers, field="description", default=guess.description, session=session
        ),
        amount=select_column(structure.headers, field="amount", default=guess.amount, session=session),
    )
    return mapping, select_locale(default=locale, session=session)


__all__ = ["confirm_mapping", "select_column", "select_locale"]
