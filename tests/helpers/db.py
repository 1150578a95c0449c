"""DB helpers for tests: bootstrap a temporary SQLite DB."""

from __future__ import annotations

import os
from pathlib import Path

from db import Base
from db.client import get_engine, session_scope
from db.models.finance import SiCategory, SiTransaction
from sqlalchemy import text as sql_text


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(database_url=url)
    Base.metadata.create_all(bind=engine)
    _assert_schema_in_sync(url)

    if set_default_env:
        os.environ.setdefault("DATABASE_URL", url)
    return url


def _assert_schema_in_sync(database_url: str) -> None:
    """ORM column sets match the created SQLite tables."""

    with session_scope(database_url=database_url) as session:
        for model in (SiCategory, SiTransaction):
            expected = {c.name for c in model.__table__.columns}
            rows = session.execute(
                sql_text(f"PRAGMA table_info('{model.__tablename__}')")
            ).fetchall()
            got = {row[1] for row in rows}  # (cid, name, type, notnull, dflt_value, pk)
            assert expected == got, f"{model.__tablename__} schema drift: {expected ^ got}"
