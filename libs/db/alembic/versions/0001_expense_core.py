# ruff: noqa: I001
"""Expense tracker core tables and indexes.

Revision ID: 0001_expense_core
Revises: None
Create Date: 2025-10-02
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

from expense_db.models.domains import (
    ACCOUNT_TYPES,
    ALERT_SEVERITIES,
    ALERT_TYPES,
    TRANSACTION_SOURCES,
    TRANSACTION_STATUSES,
    TRANSACTION_TYPES,
    UPLOAD_STATUSES,
    UPLOAD_TYPES,
    in_check,
    on_delete,
    references,
)


# revision identifiers, used by Alembic.
revision: str = "0001_expense_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _json() -> sa.types.TypeEngine:
    return sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def _ts(name: str, **kw) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=True, **kw)


def _now(name: str) -> sa.Column:
    return _ts(name, server_default=sa.func.now())


def _flag(name: str, default: bool) -> sa.Column:
    return sa.Column(
        name, sa.Boolean(), nullable=True, server_default=sa.text("true" if default else "false")
    )


def _fk(table: str, column: str) -> sa.ForeignKeyConstraint:
    target = references(table, column)
    return sa.ForeignKeyConstraint(
        [column],
        [target],
        name=f"fk_{table}_{column}",
        ondelete=on_delete(table, column),
    )


def _desc(column: str) -> sa.TextClause:
    return sa.text(f'"{column}" DESC')


# (index name, table, columns)
_INDEXES: tuple[tuple[str, str, list], ...] = (
    ("idx_users_email", "users", ["email"]),
    ("idx_users_active", "users", ["isActive"]),
    ("idx_accounts_user", "accounts", ["userId"]),
    ("idx_accounts_type", "accounts", ["type"]),
    ("idx_accounts_active", "accounts", ["isActive"]),
    ("idx_categories_parent", "categories", ["parentId"]),
    ("idx_categories_active", "categories", ["isActive"]),
    ("idx_categories_name", "categories", ["name"]),
    ("idx_transactions_user", "transactions", ["userId"]),
    ("idx_transactions_account", "transactions", ["accountId"]),
    ("idx_transactions_category", "transactions", ["categoryId"]),
    ("idx_transactions_date", "transactions", [_desc("transactionDate")]),
    ("idx_transactions_amount", "transactions", ["amount"]),
    ("idx_transactions_type", "transactions", ["type"]),
    ("idx_transactions_status", "transactions", ["status"]),
    ("idx_transactions_source", "transactions", ["source"]),
    ("idx_transactions_dedupe", "transactions", ["dedupeHash"]),
    ("idx_transactions_ml_confidence", "transactions", ["mlConfidence"]),
    ("idx_transactions_created", "transactions", [_desc("createdAt")]),
    ("idx_transactions_user_date", "transactions", ["userId", _desc("transactionDate")]),
    ("idx_transactions_user_category", "transactions", ["userId", "categoryId"]),
    ("idx_transactions_user_status", "transactions", ["userId", "status"]),
    ("idx_rules_user", "rules", ["userId"]),
    ("idx_rules_active", "rules", ["isActive"]),
    ("idx_rules_priority", "rules", [_desc("priority")]),
    ("idx_uploads_user", "uploads", ["userId"]),
    ("idx_uploads_status", "uploads", ["status"]),
    ("idx_uploads_type", "uploads", ["type"]),
    ("idx_uploads_created", "uploads", [_desc("createdAt")]),
    ("idx_alerts_user", "alerts", ["userId"]),
    ("idx_alerts_type", "alerts", ["type"]),
    ("idx_alerts_read", "alerts", ["isRead"]),
    ("idx_alerts_active", "alerts", ["isActive"]),
    ("idx_alerts_triggered", "alerts", [_desc("triggeredAt")]),
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("firstName", sa.Text(), nullable=True),
        sa.Column("lastName", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        _flag("isActive", True),
        _flag("emailVerified", False),
        _flag("onboardingCompleted", False),
        sa.Column("preferences", _json(), nullable=True, server_default=sa.text("'{}'")),
        _now("createdAt"),
        _now("updatedAt"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("parentId", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.Text(), nullable=True, server_default=sa.text("'#6b7280'")),
        sa.Column("icon", sa.Text(), nullable=True),
        _flag("isActive", True),
        _now("createdAt"),
        sa.UniqueConstraint("name", name="uq_categories_name"),
        _fk("categories", "parentId"),
    )

    op.create_table(
        "accounts",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("userId", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("accountNumber", sa.Text(), nullable=True),
        sa.Column("routingNumber", sa.Text(), nullable=True),
        sa.Column("balance", sa.Numeric(15, 2), nullable=True, server_default=sa.text("0")),
        sa.Column("currency", sa.Text(), nullable=True, server_default=sa.text("'USD'")),
        _flag("isActive", True),
        _ts("lastSynced"),
        _now("createdAt"),
        _now("updatedAt"),
        _fk("accounts", "userId"),
        sa.CheckConstraint(in_check("type", ACCOUNT_TYPES), name="ck_accounts_type"),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("userId", sa.Text(), nullable=False),
        sa.Column("accountId", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column("transactionDate", sa.Date(), nullable=False),
        sa.Column("merchant", sa.Text(), nullable=True),
        sa.Column("categoryId", sa.Text(), nullable=True),
        sa.Column("subcategoryId", sa.Text(), nullable=True),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("dedupeHash", sa.Text(), nullable=False),
        sa.Column("originalDescription", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("reference", sa.Text(), nullable=True),
        sa.Column("mlCategory", sa.Text(), nullable=True),
        sa.Column("mlConfidence", sa.Numeric(5, 2), nullable=True),
        sa.Column("mlExplanation", sa.Text(), nullable=True),
        _flag("aiSuggested", False),
        _flag("userCorrected", False),
        sa.Column("status", sa.Text(), nullable=True, server_default=sa.text("'pending'")),
        sa.Column("processingNotes", sa.Text(), nullable=True),
        sa.Column("source", sa.Text(), nullable=True, server_default=sa.text("'manual'")),
        sa.Column("sourceId", sa.Text(), nullable=True),
        sa.Column("rawData", _json(), nullable=True),
        _now("createdAt"),
        _now("updatedAt"),
        _fk("transactions", "userId"),
        _fk("transactions", "accountId"),
        _fk("transactions", "categoryId"),
        _fk("transactions", "subcategoryId"),
        sa.UniqueConstraint("dedupeHash", name="uq_transactions_dedupe_hash"),
        sa.CheckConstraint(in_check("type", TRANSACTION_TYPES), name="ck_transactions_type"),
        sa.CheckConstraint(
            in_check("status", TRANSACTION_STATUSES), name="ck_transactions_status"
        ),
        sa.CheckConstraint(
            in_check("source", TRANSACTION_SOURCES), name="ck_transactions_source"
        ),
    )

    op.create_table(
        "rules",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("userId", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("conditions", _json(), nullable=False),
        sa.Column("actions", _json(), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=True, server_default=sa.text("0")),
        _flag("isActive", True),
        sa.Column("matchCount", sa.Integer(), nullable=True, server_default=sa.text("0")),
        _ts("lastMatched"),
        _now("createdAt"),
        _now("updatedAt"),
        _fk("rules", "userId"),
    )

    op.create_table(
        "uploads",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("userId", sa.Text(), nullable=False),
        sa.Column("filename", sa.Text(), nullable=False),
        sa.Column("originalName", sa.Text(), nullable=False),
        sa.Column("fileSize", sa.Integer(), nullable=True),
        sa.Column("mimeType", sa.Text(), nullable=True),
        sa.Column("fileUrl", sa.Text(), nullable=True),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=True, server_default=sa.text("'uploaded'")),
        sa.Column("processedRows", sa.Integer(), nullable=True, server_default=sa.text("0")),
        sa.Column("totalRows", sa.Integer(), nullable=True, server_default=sa.text("0")),
        sa.Column("errorCount", sa.Integer(), nullable=True, server_default=sa.text("0")),
        sa.Column("errors", _json(), nullable=True),
        sa.Column("metadata", _json(), nullable=True),
        _ts("processedAt"),
        _now("createdAt"),
        _fk("uploads", "userId"),
        sa.CheckConstraint(in_check("type", UPLOAD_TYPES), name="ck_uploads_type"),
        sa.CheckConstraint(in_check("status", UPLOAD_STATUSES), name="ck_uploads_status"),
    )

    op.create_table(
        "alerts",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("userId", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("categoryId", sa.Text(), nullable=True),
        sa.Column("accountId", sa.Text(), nullable=True),
        sa.Column("threshold", sa.Numeric(15, 2), nullable=True),
        sa.Column("currentValue", sa.Numeric(15, 2), nullable=True),
        sa.Column("severity", sa.Text(), nullable=True, server_default=sa.text("'info'")),
        _flag("isRead", False),
        _flag("isActive", True),
        _now("triggeredAt"),
        sa.Column("metadata", _json(), nullable=True),
        _fk("alerts", "userId"),
        _fk("alerts", "categoryId"),
        _fk("alerts", "accountId"),
        sa.CheckConstraint(in_check("type", ALERT_TYPES), name="ck_alerts_type"),
        sa.CheckConstraint(in_check("severity", ALERT_SEVERITIES), name="ck_alerts_severity"),
    )

    for name, table, columns in _INDEXES:
        op.create_index(name, table, columns, unique=False)


def downgrade() -> None:
    for name, table, _columns in reversed(_INDEXES):
        op.drop_index(name, table_name=table)
    for table in ("alerts", "uploads", "rules", "transactions", "accounts", "categories", "users"):
        op.drop_table(table)
