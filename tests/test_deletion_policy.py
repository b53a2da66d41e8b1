from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy import text as sql_text

from expense_db.client import session_scope
from expense_db.models import Account, Alert, Category, Rule, Transaction, Upload, User
from expense_db.models.domains import CASCADE, DELETION_POLICY, SET_NULL


def _populate(database_url: str) -> None:
    with session_scope(database_url=database_url) as s:
        s.add(Category(id="cat_food", name="Food"))
        s.add(Category(id="cat_groceries", name="Groceries", parent_id="cat_food"))
        s.add(User(id="u1", email="u1@example.com"))
        s.add(User(id="u2", email="u2@example.com"))
        s.flush()
        s.add(Account(id="a1", user_id="u1", name="Checking", type="checking"))
        s.add(Account(id="a2", user_id="u2", name="Savings", type="savings"))
        s.flush()
        for uid, aid in (("u1", "a1"), ("u2", "a2")):
            s.add(
                Transaction(
                    id=f"t_{uid}",
                    user_id=uid,
                    account_id=aid,
                    description="GROCERY STORE",
                    amount=Decimal("-120.50"),
                    transaction_date=date(2024, 1, 10),
                    category_id="cat_food",
                    subcategory_id="cat_groceries",
                    type="expense",
                    dedupe_hash=f"hash_{uid}",
                )
            )
            s.add(Rule(id=f"r_{uid}", user_id=uid, name="groceries", conditions={}, actions={}))
            s.add(
                Upload(
                    id=f"up_{uid}",
                    user_id=uid,
                    filename="jan.csv",
                    original_name="jan.csv",
                    type="csv",
                )
            )
            s.add(
                Alert(
                    id=f"al_{uid}",
                    user_id=uid,
                    type="budget_exceeded",
                    title="Budget",
                    message="Food budget exceeded",
                    category_id="cat_food",
                    account_id=aid,
                )
            )


def _count(s, model, **where) -> int:
    stmt = select(func.count()).select_from(model)
    for attr, value in where.items():
        stmt = stmt.where(getattr(model, attr) == value)
    return s.scalar(stmt)


def test_deleting_user_removes_all_owned_rows(db_url: str) -> None:
    _populate(db_url)
    with session_scope(database_url=db_url) as s:
        s.execute(delete(User.__table__).where(User.__table__.c.id == "u1"))

    with session_scope(database_url=db_url) as s:
        for model in (Account, Transaction, Rule, Upload, Alert):
            assert _count(s, model, user_id="u1") == 0, model.__tablename__
            assert _count(s, model, user_id="u2") == 1, model.__tablename__
        assert _count(s, Category) == 2


def test_orm_delete_of_user_with_loaded_children_removes_owned_rows(db_url: str) -> None:
    _populate(db_url)
    with session_scope(database_url=db_url) as s:
        user = s.get(User, "u1")
        assert user is not None
        assert [a.id for a in user.accounts] == ["a1"]
        s.delete(user)

    with session_scope(database_url=db_url) as s:
        assert s.get(User, "u1") is None
        for model in (Account, Transaction, Rule, Upload, Alert):
            assert _count(s, model, user_id="u1") == 0, model.__tablename__
            assert _count(s, model, user_id="u2") == 1, model.__tablename__


def test_deleting_category_nulls_references(db_url: str) -> None:
    _populate(db_url)
    with session_scope(database_url=db_url) as s:
        s.execute(delete(Category.__table__).where(Category.__table__.c.id == "cat_food"))

    with session_scope(database_url=db_url) as s:
        tx = s.get(Transaction, "t_u1")
        assert tx is not None
        assert tx.category_id is None
        assert tx.subcategory_id == "cat_groceries"
        alert = s.get(Alert, "al_u1")
        assert alert is not None and alert.category_id is None
        child = s.get(Category, "cat_groceries")
        assert child is not None and child.parent_id is None


def test_deleting_subcategory_nulls_subcategory_only(db_url: str) -> None:
    _populate(db_url)
    with session_scope(database_url=db_url) as s:
        s.execute(delete(Category.__table__).where(Category.__table__.c.id == "cat_groceries"))

    with session_scope(database_url=db_url) as s:
        tx = s.get(Transaction, "t_u1")
        assert tx is not None
        assert tx.subcategory_id is None
        assert tx.category_id == "cat_food"


def test_deleting_account_keeps_transactions(db_url: str) -> None:
    _populate(db_url)
    with session_scope(database_url=db_url) as s:
        s.execute(delete(Account.__table__).where(Account.__table__.c.id == "a1"))

    with session_scope(database_url=db_url) as s:
        tx = s.get(Transaction, "t_u1")
        assert tx is not None and tx.account_id is None
        alert = s.get(Alert, "al_u1")
        assert alert is not None and alert.account_id is None


def test_every_foreign_key_follows_the_deletion_policy(db_url: str) -> None:
    seen: dict[tuple[str, str], tuple[str, str]] = {}
    with session_scope(database_url=db_url) as s:
        for table in {t for t, _ in DELETION_POLICY}:
            rows = s.execute(sql_text(f"PRAGMA foreign_key_list('{table}')")).fetchall()
            # (id, seq, table, from, to, on_update, on_delete, match)
            for row in rows:
                seen[(table, row[3])] = (f"{row[2]}.{row[4]}", row[6])
    assert seen == DELETION_POLICY


@pytest.mark.parametrize(("key", "target"), sorted(DELETION_POLICY.items()))
def test_orm_foreign_keys_match_policy(key: tuple[str, str], target: tuple[str, str]) -> None:
    table, column = key
    ref, action = target
    col = User.metadata.tables[table].c[column]
    (fk,) = col.foreign_keys
    assert fk.target_fullname == ref
    assert fk.ondelete == action
    assert action in (CASCADE, SET_NULL)
