"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the statement-import models used by ``statement_import``.
"""

from .finance import Base, SiCategory, SiTransaction

__all__ = [
    "Base",
    "SiCategory",
    "SiTransaction",
]
