# ruff: noqa: I001
"""Alembic environment for the statement-import schema (``si_*`` tables).

Migrations run programmatically (see ``tests/test_db_migrations.py``): the
caller sets ``script_location`` and usually ``sqlalchemy.url`` on an Alembic
``Config``. When no URL is set there, ``DATABASE_URL`` from the environment
(or a workspace ``.env``) is used.
"""

from __future__ import annotations

import os

from alembic import context
from sqlalchemy import create_engine, pool
from dotenv import load_dotenv, find_dotenv

import db as _db_pkg

dotenv_path = find_dotenv(usecwd=True)
if dotenv_path:
    load_dotenv(dotenv_path=dotenv_path, override=False)

db_url = context.config.get_main_option("sqlalchemy.url") or os.getenv("DATABASE_URL")
if not db_url:
    raise RuntimeError("No database URL: set 'sqlalchemy.url' on the Alembic config or DATABASE_URL.")

engine = create_engine(db_url, poolclass=pool.NullPool)
try:
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=_db_pkg.metadata,
            compare_type=True,
            # SQLite needs table rebuilds for ALTER operations.
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()
finally:
    engine.dispose()
