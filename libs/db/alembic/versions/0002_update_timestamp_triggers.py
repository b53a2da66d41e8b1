# ruff: noqa: I001
"""Refresh "updatedAt" on every update of users, accounts, transactions and rules.

Revision ID: 0002_update_timestamp_triggers
Revises: 0001_expense_core
Create Date: 2025-10-02
"""

from __future__ import annotations

from collections.abc import Sequence

from alembic import op

from expense_db.ddl import drop_timestamp_trigger_statements, timestamp_trigger_statements


# revision identifiers, used by Alembic.
revision: str = "0002_update_timestamp_triggers"
down_revision: str | None = "0001_expense_core"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    dialect = op.get_context().dialect.name
    for sql in timestamp_trigger_statements(dialect):
        op.execute(sql)


def downgrade() -> None:
    dialect = op.get_context().dialect.name
    for sql in drop_timestamp_trigger_statements(dialect):
        op.execute(sql)
