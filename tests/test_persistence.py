from datetime import date

from db.client import session_scope
from db.models.finance import SiTransaction
from sqlalchemy import func, select

from statement_import.categories import CategoryBook
from statement_import.models import Transaction
from statement_import.persistence import (
    compute_fingerprint,
    load_categories,
    load_transactions,
    save_categories,
    save_transactions,
)
from tests.helpers.db import bootstrap_sqlite_db


def _tx(tx_id: str, day: int, description: str, amount: float, **kw) -> Transaction:
    return Transaction(id=tx_id, date=date(2024, 5, day), description=description, amount=amount, **kw)


def test_fingerprint_ignores_id_and_description_spacing():
    a = _tx("a", 1, "Mercadona  Centro", -10.0)
    b = _tx("b", 1, "mercadona centro", -10.0)
    assert compute_fingerprint(a) == compute_fingerprint(b)
    assert compute_fingerprint(a) != compute_fingerprint(a, occurrence=1)


def test_resaving_the_same_statement_inserts_nothing(tmp_path):
    url = bootstrap_sqlite_db(tmp_path / "db.sqlite")
    first = [_tx("a", 1, "Mercadona", -10.0), _tx("b", 2, "Nómina", 1500.0)]
    with session_scope(database_url=url) as session:
        assert save_transactions(session, first) == 2

    again = [_tx("x", 1, "Mercadona", -10.0), _tx("y", 2, "Nómina", 1500.0)]
    with session_scope(database_url=url) as session:
        assert save_transactions(session, again) == 0
        assert session.scalar(select(func.count()).select_from(SiTransaction)) == 2


def test_identical_rows_in_one_statement_are_both_kept(tmp_path):
    url = bootstrap_sqlite_db(tmp_path / "db.sqlite")
    rows = [_tx("a", 3, "Bus", -1.5), _tx("b", 3, "Bus", -1.5)]
    with session_scope(database_url=url) as session:
        assert save_transactions(session, rows) == 2
    with session_scope(database_url=url) as session:
        loaded = load_transactions(session)
    assert sorted(t.id for t in loaded) == ["a", "b"]


def test_edited_row_is_updated_in_place(tmp_path):
    url = bootstrap_sqlite_db(tmp_path / "db.sqlite")
    with session_scope(database_url=url) as session:
        save_transactions(session, [_tx("a", 1, "Cine", -9.0)])
    with session_scope(database_url=url) as session:
        assert save_transactions(session, [_tx("a", 1, "Cine Yelmo", -9.0, category="Ocio")]) == 0
    with session_scope(database_url=url) as session:
        (row,) = load_transactions(session)
    assert row.description == "Cine Yelmo"
    assert row.category == "Ocio"
    assert row.amount == -9.0


def test_load_transactions_newest_first(tmp_path):
    url = bootstrap_sqlite_db(tmp_path / "db.sqlite")
    with session_scope(database_url=url) as session:
        save_transactions(session, [_tx("old", 1, "A", -1.0), _tx("new", 9, "B", -2.0, ignored=True)])
    with session_scope(database_url=url) as session:
        loaded = load_transactions(session)
    assert [t.id for t in loaded] == ["new", "old"]
    assert loaded[0].ignored is True


def test_categories_round_trip_keeps_order(tmp_path):
    url = bootstrap_sqlite_db(tmp_path / "db.sqlite")
    book = CategoryBook()
    book.add_category("income", "Salario", keywords=["nomina"], category_id="inc-1")
    book.add_category("expense", "Super", keywords=["mercadona", "lidl"], category_id="exp-2")
    book.add_category("expense", "Ocio", category_id="exp-1")
    with session_scope(database_url=url) as session:
        assert save_categories(session, book) == 3

    with session_scope(database_url=url) as session:
        loaded = load_categories(session)
    assert [c.name for c in loaded.expense] == ["Super", "Ocio"]
    assert loaded.get("expense", "exp-2").keywords == ("mercadona", "lidl")
    assert [c.id for c in loaded.income] == ["inc-1"]

    smaller = CategoryBook()
    smaller.add_category("expense", "Hogar", category_id="exp-9")
    with session_scope(database_url=url) as session:
        save_categories(session, smaller)
    with session_scope(database_url=url) as session:
        assert [c.id for c in load_categories(session)] == ["exp-9"]
