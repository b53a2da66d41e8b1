from __future__ import annotations

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from expense_db.ddl import (
    RLS_OWNER,
    VIEW_NAMES,
    drop_rls_policy_statements,
    policy_name,
    resolve_rls_mode,
    rls_policy_statements,
    timestamp_trigger_statements,
    view_statements,
)
from expense_db.models import TABLE_ORDER, TIMESTAMPED_TABLES, Transaction


def _policy(stmts: list[str], verb: str, table: str) -> str:
    prefix = f'CREATE POLICY "{policy_name(verb, table)}" ON {table} '
    (match,) = [s for s in stmts if s.startswith(prefix)]
    return match


def test_postgres_timestamp_trigger_uses_shared_function() -> None:
    stmts = timestamp_trigger_statements("postgresql")

    assert stmts[0].startswith("CREATE OR REPLACE FUNCTION update_timestamp()")
    assert 'NEW."updatedAt" = NOW()' in stmts[0]
    creates = [s for s in stmts if s.startswith("CREATE TRIGGER")]
    assert len(creates) == len(TIMESTAMPED_TABLES)
    assert all("BEFORE UPDATE" in s and "update_timestamp()" in s for s in creates)


def test_permissive_policies_allow_everything() -> None:
    stmts = rls_policy_statements("postgresql", mode="permissive")

    enabled = [s for s in stmts if s.endswith("ENABLE ROW LEVEL SECURITY")]
    assert len(enabled) == len(TABLE_ORDER)
    creates = [s for s in stmts if s.startswith("CREATE POLICY")]
    assert len(creates) == 4 * len(TABLE_ORDER)
    assert _policy(stmts, "read", "users").endswith("FOR SELECT USING (true)")
    assert _policy(stmts, "insert", "transactions").endswith("FOR INSERT WITH CHECK (true)")


def test_owner_policies_scope_rows_to_current_user() -> None:
    stmts = rls_policy_statements("postgresql", mode=RLS_OWNER)

    owner = "current_setting('app.current_user_id', true)"
    assert f'"userId" = {owner}' in _policy(stmts, "read", "transactions")
    assert f"id = {owner}" in _policy(stmts, "update", "users")
    assert _policy(stmts, "delete", "categories").endswith("USING (true)")


def test_rls_mode_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXPENSE_DB_RLS_MODE", "OWNER")
    assert resolve_rls_mode() == "owner"
    assert resolve_rls_mode("permissive") == "permissive"

    monkeypatch.setenv("EXPENSE_DB_RLS_MODE", "everyone")
    with pytest.raises(ValueError):
        resolve_rls_mode()


def test_rls_is_postgres_only() -> None:
    assert rls_policy_statements("sqlite") == []
    assert drop_rls_policy_statements("sqlite") == []


def test_view_month_bucket_is_dialect_specific() -> None:
    pg = view_statements("postgresql")
    lite = view_statements("sqlite")

    assert pg[:3] == [f"DROP VIEW IF EXISTS {v}" for v in VIEW_NAMES]
    assert "DATE_TRUNC('month'" in pg[3]
    assert "'start of month'" in lite[3]


def test_postgres_transactions_ddl() -> None:
    ddl = str(CreateTable(Transaction.__table__).compile(dialect=postgresql.dialect()))

    assert "JSONB" in ddl
    assert '"dedupeHash" TEXT NOT NULL' in ddl
    assert "NUMERIC(15, 2)" in ddl
    assert "ON DELETE CASCADE" in ddl
    assert "ON DELETE SET NULL" in ddl
    assert "CONSTRAINT uq_transactions_dedupe_hash UNIQUE" in ddl
