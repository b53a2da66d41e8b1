from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import insert, select
from sqlalchemy import text as sql_text

from expense_db.client import session_scope
from expense_db.ddl import trigger_name
from expense_db.models import TIMESTAMPED_TABLES, Account, Category, Rule, Transaction, User

from tests.helpers.db import sqlite_objects

OLD = datetime(2000, 1, 1, 0, 0, 0)


def _stale_user(database_url: str) -> None:
    with session_scope(database_url=database_url) as s:
        s.execute(
            insert(User.__table__).values(
                id="u1", email="u1@example.com", createdAt=OLD, updatedAt=OLD
            )
        )


def test_no_op_update_refreshes_updated_at(db_url: str) -> None:
    _stale_user(db_url)
    with session_scope(database_url=db_url) as s:
        s.execute(sql_text("UPDATE users SET email = email WHERE id = 'u1'"))

    with session_scope(database_url=db_url) as s:
        row = s.execute(
            select(User.__table__.c.createdAt, User.__table__.c.updatedAt).where(
                User.__table__.c.id == "u1"
            )
        ).one()
    assert row.updatedAt > OLD
    assert row.createdAt == OLD


def test_orm_update_reads_back_trigger_value(db_url: str) -> None:
    _stale_user(db_url)
    with session_scope(database_url=db_url) as s:
        s.execute(
            insert(Account.__table__).values(
                id="a1", userId="u1", name="Checking", type="checking", updatedAt=OLD
            )
        )

    with session_scope(database_url=db_url) as s:
        account = s.get(Account, "a1")
        assert account is not None
        assert account.updated_at == OLD
        account.name = "HDFC Checking"
        s.flush()
        assert account.updated_at > OLD


def test_update_of_other_rows_leaves_timestamp_alone(db_url: str) -> None:
    _stale_user(db_url)
    with session_scope(database_url=db_url) as s:
        s.execute(
            insert(User.__table__).values(id="u2", email="u2@example.com", updatedAt=OLD)
        )
        s.execute(sql_text("UPDATE users SET phone = '555' WHERE id = 'u2'"))

    with session_scope(database_url=db_url) as s:
        stamp = s.scalar(select(User.__table__.c.updatedAt).where(User.__table__.c.id == "u1"))
    assert stamp == OLD


def test_triggers_exist_only_for_timestamped_tables(db_url: str) -> None:
    assert sqlite_objects(db_url, "trigger") == {trigger_name(t) for t in TIMESTAMPED_TABLES}
    assert "updatedAt" not in Category.__table__.c


# Column rewritten by the no-op UPDATE for each timestamped table.
_TOUCH_COLUMN = {
    "users": "email",
    "accounts": "name",
    "transactions": "description",
    "rules": "name",
}


def _stale_rows(database_url: str) -> None:
    _stale_user(database_url)
    with session_scope(database_url=database_url) as s:
        s.execute(
            insert(Account.__table__).values(
                id="a1", userId="u1", name="Checking", type="checking", updatedAt=OLD
            )
        )
        s.execute(
            insert(Transaction.__table__).values(
                id="t1",
                userId="u1",
                accountId="a1",
                description="SWIGGY FOOD DELIVERY",
                amount=Decimal("-450.00"),
                transactionDate=date(2024, 1, 15),
                type="expense",
                dedupeHash="hash_swiggy_450_20240115",
                updatedAt=OLD,
            )
        )
        s.execute(
            insert(Rule.__table__).values(
                id="r1",
                userId="u1",
                name="Food delivery",
                conditions={"merchant": "Swiggy"},
                actions={"categoryId": "cat_food_dining"},
                updatedAt=OLD,
            )
        )


@pytest.mark.parametrize("table", TIMESTAMPED_TABLES)
def test_raw_update_refreshes_updated_at_on_every_timestamped_table(
    db_url: str, table: str
) -> None:
    _stale_rows(db_url)
    column = _TOUCH_COLUMN[table]
    with session_scope(database_url=db_url) as s:
        s.execute(sql_text(f'UPDATE {table} SET "{column}" = "{column}"'))

    with session_scope(database_url=db_url) as s:
        stamps = s.scalars(select(User.metadata.tables[table].c.updatedAt)).all()
    assert len(stamps) == 1
    assert stamps[0] is not None
    assert stamps[0] > OLD
