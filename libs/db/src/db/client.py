"""Process-wide SQLAlchemy engine and session scope for the ``si_*`` tables.

The engine is created lazily from an explicit URL or ``DATABASE_URL`` and then
pinned to that URL for the life of the process (or until
:func:`dispose_engine`). Callers own transactions through
:func:`session_scope`::

    from db.client import session_scope
    from statement_import.persistence import save_transactions

    with session_scope(database_url=url) as session:
        save_transactions(session, promoted)
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

_ENGINE: Engine | None = None
_SESSION_MAKER: sessionmaker[Session] | None = None
_DB_URL: str | None = None


def _resolve_url(override: str | None) -> str:
    url = override or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("No database configured: pass --database-url or set DATABASE_URL")
    return url


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return the shared engine; a different URL than the pinned one is an error."""

    global _ENGINE, _SESSION_MAKER, _DB_URL
    url = _resolve_url(database_url)
    if _ENGINE is not None:
        if url != _DB_URL:
            raise RuntimeError(
                f"database engine is bound to {_DB_URL!r}; call dispose_engine() before "
                f"switching to {url!r}"
            )
        return _ENGINE
    _ENGINE = create_engine(url, pool_pre_ping=True)
    _SESSION_MAKER = sessionmaker(bind=_ENGINE, expire_on_commit=False)
    _DB_URL = url
    return _ENGINE


def get_session(*, database_url: str | None = None) -> Session:
    get_engine(database_url=database_url)
    assert _SESSION_MAKER is not None  # bound by get_engine
    return _SESSION_MAKER()


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Commit on success, roll back and re-raise on any error, always close."""

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def dispose_engine() -> None:
    """Dispose the shared engine and forget its URL."""

    global _ENGINE, _SESSION_MAKER, _DB_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _SESSION_MAKER = None
    _DB_URL = None


__all__ = [
    "dispose_engine",
    "get_engine",
    "get_session",
    "session_scope",
]
