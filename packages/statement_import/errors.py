"""Batch-level import failures.

Per-cell and per-row problems never raise; they degrade to defaults and are
counted. Only structural problems that make a whole batch impossible are
reported through these exceptions, always with a message that can be shown to
the user as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .workflows.import_flow import SkipCounts


class BatchImportError(ValueError):
    """A batch cannot be processed; nothing was staged or committed."""

    def __init__(self, message: str, *, skipped: SkipCounts | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.skipped = skipped


class EmptyGridError(BatchImportError):
    """The sheet has no rows (or no data rows below the header)."""


__all__ = ["BatchImportError", "EmptyGridError"]
