from datetime import date

import pytest
from db.client import dispose_engine, get_engine, session_scope
from db.models.finance import SiTransaction
from sqlalchemy import func, select

from tests.helpers.db import bootstrap_sqlite_db


def test_session_scope_rolls_back_on_error(tmp_path):
    url = bootstrap_sqlite_db(tmp_path / "db.sqlite")
    with pytest.raises(RuntimeError, match="boom"):
        with session_scope(database_url=url) as session:
            session.add(
                SiTransaction(
                    id="t1",
                    fingerprint_sha256="0" * 64,
                    date=date(2024, 1, 1),
                    description="Cine",
                    amount=-9,
                )
            )
            session.flush()
            raise RuntimeError("boom")

    with session_scope(database_url=url) as session:
        assert session.scalar(select(func.count()).select_from(SiTransaction)) == 0


def test_engine_is_pinned_until_disposed(tmp_path):
    first = bootstrap_sqlite_db(tmp_path / "a.sqlite")
    other = f"sqlite+pysqlite:///{tmp_path / 'b.sqlite'}"
    with pytest.raises(RuntimeError, match="dispose_engine"):
        get_engine(database_url=other)

    dispose_engine()
    assert str(get_engine(database_url=other).url) == other
    assert other != first


def test_missing_url_is_reported():
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        get_engine()
