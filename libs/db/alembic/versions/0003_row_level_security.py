# ruff: noqa: I001
"""Row-level security policies (Postgres only).

The policy mode comes from EXPENSE_DB_RLS_MODE (``permissive`` by default).
Other dialects skip this revision.

Revision ID: 0003_row_level_security
Revises: 0002_update_timestamp_triggers
Create Date: 2025-10-03
"""

from __future__ import annotations

from collections.abc import Sequence

from alembic import op

from expense_db.ddl import drop_rls_policy_statements, rls_policy_statements


# revision identifiers, used by Alembic.
revision: str = "0003_row_level_security"
down_revision: str | None = "0002_update_timestamp_triggers"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    for sql in rls_policy_statements(op.get_context().dialect.name):
        op.execute(sql)


def downgrade() -> None:
    for sql in drop_rls_policy_statements(op.get_context().dialect.name):
        op.execute(sql)
