from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from expense_db.client import session_scope
from expense_db.models import Account, Alert, Category, Transaction, Upload, User

from tests.helpers.db import sqlite_objects


def _add_user(database_url: str, user_id: str = "u1", email: str = "u1@example.com") -> None:
    with session_scope(database_url=database_url) as s:
        s.add(User(id=user_id, email=email))


def _expense(tx_id: str, dedupe_hash: str, **overrides) -> Transaction:
    fields = dict(
        id=tx_id,
        user_id="u1",
        description="SWIGGY FOOD DELIVERY",
        amount=Decimal("-450.00"),
        transaction_date=date(2024, 1, 15),
        type="expense",
        dedupe_hash=dedupe_hash,
    )
    fields.update(overrides)
    return Transaction(**fields)


def test_second_transaction_with_same_dedupe_hash_is_rejected(db_url: str) -> None:
    _add_user(db_url)
    with session_scope(database_url=db_url) as s:
        s.add(_expense("t1", "h1"))

    with pytest.raises(IntegrityError):
        with session_scope(database_url=db_url) as s:
            s.add(_expense("t2", "h1"))

    with session_scope(database_url=db_url) as s:
        assert [t.id for t in s.query(Transaction).all()] == ["t1"]


def test_server_defaults_fill_status_source_and_flags(db_url: str) -> None:
    _add_user(db_url)
    with session_scope(database_url=db_url) as s:
        s.add(_expense("t1", "h1"))

    with session_scope(database_url=db_url) as s:
        tx = s.get(Transaction, "t1")
        assert tx is not None
        assert tx.status == "pending"
        assert tx.source == "manual"
        assert tx.ai_suggested is False
        assert tx.user_corrected is False
        assert tx.created_at is not None
        user = s.get(User, "u1")
        assert user is not None
        assert user.is_active is True
        assert user.onboarding_completed is False


def test_account_type_outside_domain_is_rejected(db_url: str) -> None:
    _add_user(db_url)
    with pytest.raises(IntegrityError):
        with session_scope(database_url=db_url) as s:
            s.add(Account(id="a1", user_id="u1", name="Wallet", type="crypto"))


@pytest.mark.parametrize(
    "overrides",
    [
        {"type": "refund"},
        {"status": "archived"},
        {"source": "fax"},
    ],
)
def test_transaction_enums_are_checked(db_url: str, overrides: dict[str, str]) -> None:
    _add_user(db_url)
    with pytest.raises(IntegrityError):
        with session_scope(database_url=db_url) as s:
            s.add(_expense("t1", "h1", **overrides))


def _upload(**overrides) -> Upload:
    fields = dict(
        id="up1", user_id="u1", filename="jan.csv", original_name="jan.csv", type="csv"
    )
    fields.update(overrides)
    return Upload(**fields)


def _alert(**overrides) -> Alert:
    fields = dict(
        id="al1", user_id="u1", type="budget_exceeded", title="Budget", message="Over budget"
    )
    fields.update(overrides)
    return Alert(**fields)


@pytest.mark.parametrize(
    ("build", "overrides"),
    [
        (_upload, {"type": "docx"}),
        (_upload, {"status": "done"}),
        (_alert, {"type": "nope"}),
        (_alert, {"severity": "fatal"}),
    ],
    ids=["upload-type", "upload-status", "alert-type", "alert-severity"],
)
def test_upload_and_alert_enums_are_checked(db_url: str, build, overrides: dict) -> None:
    _add_user(db_url)
    with pytest.raises(IntegrityError):
        with session_scope(database_url=db_url) as s:
            s.add(build(**overrides))


def test_upload_and_alert_accept_their_defaults(db_url: str) -> None:
    _add_user(db_url)
    with session_scope(database_url=db_url) as s:
        s.add(_upload())
        s.add(_alert())

    with session_scope(database_url=db_url) as s:
        assert s.get(Upload, "up1").status == "uploaded"
        assert s.get(Alert, "al1").severity == "info"


def test_user_email_and_category_name_are_unique(db_url: str) -> None:
    _add_user(db_url)
    with pytest.raises(IntegrityError):
        _add_user(db_url, user_id="u2", email="u1@example.com")

    with session_scope(database_url=db_url) as s:
        s.add(Category(id="c1", name="Food & Dining"))
    with pytest.raises(IntegrityError):
        with session_scope(database_url=db_url) as s:
            s.add(Category(id="c2", name="Food & Dining"))


def test_transaction_requires_existing_user(db_url: str) -> None:
    with pytest.raises(IntegrityError):
        with session_scope(database_url=db_url) as s:
            s.add(_expense("t1", "h1", user_id="nobody"))


def test_named_indexes_exist(db_url: str) -> None:
    indexes = sqlite_objects(db_url, "index")
    expected = {
        "idx_users_email",
        "idx_users_active",
        "idx_accounts_user",
        "idx_accounts_type",
        "idx_accounts_active",
        "idx_categories_parent",
        "idx_categories_active",
        "idx_categories_name",
        "idx_transactions_user",
        "idx_transactions_account",
        "idx_transactions_category",
        "idx_transactions_date",
        "idx_transactions_amount",
        "idx_transactions_type",
        "idx_transactions_status",
        "idx_transactions_source",
        "idx_transactions_dedupe",
        "idx_transactions_ml_confidence",
        "idx_transactions_created",
        "idx_transactions_user_date",
        "idx_transactions_user_category",
        "idx_transactions_user_status",
        "idx_rules_user",
        "idx_rules_active",
        "idx_rules_priority",
        "idx_uploads_user",
        "idx_uploads_status",
        "idx_uploads_type",
        "idx_uploads_created",
        "idx_alerts_user",
        "idx_alerts_type",
        "idx_alerts_read",
        "idx_alerts_active",
        "idx_alerts_triggered",
    }
    assert expected <= indexes
