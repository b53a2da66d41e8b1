# ruff: noqa: I001
"""Analytics views: monthly_spending, daily_spending, top_merchants.

Revision ID: 0004_analytics_views
Revises: 0003_row_level_security
Create Date: 2025-10-03
"""

from __future__ import annotations

from collections.abc import Sequence

from alembic import op

from expense_db.ddl import drop_view_statements, view_statements


# revision identifiers, used by Alembic.
revision: str = "0004_analytics_views"
down_revision: str | None = "0003_row_level_security"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    for sql in view_statements(op.get_context().dialect.name):
        op.execute(sql)


def downgrade() -> None:
    for sql in drop_view_statements(op.get_context().dialect.name):
        op.execute(sql)
