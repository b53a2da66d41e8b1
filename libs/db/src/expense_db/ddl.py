"""Dialect-specific DDL that the ORM cannot express declaratively.

Three groups of statements live here:

- ``updatedAt`` maintenance triggers (one shared plpgsql function on Postgres,
  one ``AFTER UPDATE`` trigger per table on SQLite);
- row-level security policies (Postgres only);
- the three analytics views.

Each group is exposed as ``*_statements(dialect_name)`` returning plain SQL
strings so that Alembic migrations can ``op.execute`` them, and
:func:`install_ddl_events` wires the same statements to ``metadata.create_all``.
"""

from __future__ import annotations

import os
from collections.abc import Iterable

from sqlalchemy import DDL, MetaData, event

from .models.expense import TABLE_ORDER, TIMESTAMPED_TABLES

POSTGRES = "postgresql"
SQLITE = "sqlite"

RLS_PERMISSIVE = "permissive"
RLS_OWNER = "owner"
RLS_MODES: tuple[str, ...] = (RLS_PERMISSIVE, RLS_OWNER)

# Session setting read by owner-mode policies (see ``client.set_current_user``).
CURRENT_USER_SETTING = "app.current_user_id"

VIEW_NAMES: tuple[str, ...] = ("monthly_spending", "daily_spending", "top_merchants")


# ---------------------------
# updatedAt triggers
# ---------------------------

_PG_TIMESTAMP_FUNCTION = """
CREATE OR REPLACE FUNCTION update_timestamp()
RETURNS TRIGGER AS $$
BEGIN
  NEW."updatedAt" = NOW();
  RETURN NEW;
END;
$$ LANGUAGE plpgsql
"""

# SQLite has no BEFORE-row assignment; re-stamp the row after the update.
# recursive_triggers is off by default, so the inner UPDATE does not re-fire.
_SQLITE_TIMESTAMP_TRIGGER = """
CREATE TRIGGER IF NOT EXISTS update_{table}_timestamp
AFTER UPDATE ON {table}
FOR EACH ROW
BEGIN
  UPDATE {table}
     SET "updatedAt" = strftime('%Y-%m-%d %H:%M:%f', 'now')
   WHERE id = NEW.id;
END
"""


def trigger_name(table: str) -> str:
    return f"update_{table}_timestamp"


def timestamp_trigger_statements(
    dialect_name: str, tables: Iterable[str] = TIMESTAMPED_TABLES
) -> list[str]:
    """SQL that installs the ``updatedAt`` refresh on every listed table."""

    tables = list(tables)
    if dialect_name == POSTGRES:
        stmts = [_PG_TIMESTAMP_FUNCTION.strip()]
        for t in tables:
            stmts.append(f"DROP TRIGGER IF EXISTS {trigger_name(t)} ON {t}")
            stmts.append(
                f"CREATE TRIGGER {trigger_name(t)}\n"
                f"  BEFORE UPDATE ON {t}\n"
                "  FOR EACH ROW\n"
                "  EXECUTE FUNCTION update_timestamp()"
            )
        return stmts
    if dialect_name == SQLITE:
        return [_SQLITE_TIMESTAMP_TRIGGER.format(table=t).strip() for t in tables]
    return []


def drop_timestamp_trigger_statements(
    dialect_name: str, tables: Iterable[str] = TIMESTAMPED_TABLES
) -> list[str]:
    tables = list(tables)
    if dialect_name == POSTGRES:
        stmts = [f"DROP TRIGGER IF EXISTS {trigger_name(t)} ON {t}" for t in tables]
        stmts.append("DROP FUNCTION IF EXISTS update_timestamp()")
        return stmts
    if dialect_name == SQLITE:
        return [f"DROP TRIGGER IF EXISTS {trigger_name(t)}" for t in tables]
    return []


# ---------------------------
# Row-level security (Postgres only)
# ---------------------------

_POLICY_VERBS: tuple[tuple[str, str], ...] = (
    ("read", "SELECT"),
    ("insert", "INSERT"),
    ("update", "UPDATE"),
    ("delete", "DELETE"),
)


def resolve_rls_mode(mode: str | None = None) -> str:
    """Return the policy mode from ``mode`` or ``EXPENSE_DB_RLS_MODE``."""

    value = (mode or os.getenv("EXPENSE_DB_RLS_MODE") or RLS_PERMISSIVE).strip().lower()
    if value not in RLS_MODES:
        raise ValueError(f"Unsupported RLS mode: {value!r}. Allowed: {list(RLS_MODES)}")
    return value


def policy_name(verb: str, table: str) -> str:
    return f"Allow public {verb} {table}"


def _owner_predicate(table: str) -> str:
    if table == "categories":
        # Shared reference data: not owned by any user.
        return "true"
    owner_col = "id" if table == "users" else '"userId"'
    return f"{owner_col} = current_setting('{CURRENT_USER_SETTING}', true)"


def rls_policy_statements(
    dialect_name: str, mode: str | None = None, tables: Iterable[str] = TABLE_ORDER
) -> list[str]:
    """Enable RLS and create one policy per verb per table.

    ``permissive`` mirrors the development setup (everyone may do everything);
    ``owner`` limits owned tables to rows whose owner matches the session's
    ``app.current_user_id``.
    """

    if dialect_name != POSTGRES:
        return []
    mode = resolve_rls_mode(mode)
    stmts: list[str] = []
    for t in tables:
        stmts.append(f"ALTER TABLE {t} ENABLE ROW LEVEL SECURITY")
    for t in tables:
        predicate = "true" if mode == RLS_PERMISSIVE else _owner_predicate(t)
        for verb, command in _POLICY_VERBS:
            name = policy_name(verb, t)
            stmts.append(f'DROP POLICY IF EXISTS "{name}" ON {t}')
            if command == "INSERT":
                clause = f"WITH CHECK ({predicate})"
            elif command == "UPDATE":
                clause = f"USING ({predicate}) WITH CHECK ({predicate})"
            else:
                clause = f"USING ({predicate})"
            stmts.append(f'CREATE POLICY "{name}" ON {t} FOR {command} {clause}')
    return stmts


def drop_rls_policy_statements(
    dialect_name: str, tables: Iterable[str] = TABLE_ORDER
) -> list[str]:
    if dialect_name != POSTGRES:
        return []
    stmts: list[str] = []
    for t in tables:
        for verb, _command in _POLICY_VERBS:
            stmts.append(f'DROP POLICY IF EXISTS "{policy_name(verb, t)}" ON {t}')
        stmts.append(f"ALTER TABLE {t} DISABLE ROW LEVEL SECURITY")
    return stmts


# ---------------------------
# Analytics views
# ---------------------------

_MONTH_EXPR = {
    POSTGRES: "DATE_TRUNC('month', t.\"transactionDate\")",
    SQLITE: "date(t.\"transactionDate\", 'start of month')",
}

_MONTHLY_SPENDING = """
CREATE VIEW monthly_spending AS
SELECT
    t."userId",
    {month} AS month,
    c.name AS category,
    COUNT(*) AS transaction_count,
    SUM(ABS(t.amount)) AS total_amount,
    AVG(ABS(t.amount)) AS avg_amount
FROM transactions t
JOIN categories c ON t."categoryId" = c.id
WHERE t.type = 'expense'
GROUP BY t."userId", {month}, c.name
ORDER BY month DESC, total_amount DESC
"""

_DAILY_SPENDING = """
CREATE VIEW daily_spending AS
SELECT
    "userId",
    "transactionDate",
    COUNT(*) AS transaction_count,
    SUM(ABS(amount)) AS total_amount
FROM transactions
WHERE type = 'expense'
GROUP BY "userId", "transactionDate"
ORDER BY "transactionDate" DESC
"""

_TOP_MERCHANTS = """
CREATE VIEW top_merchants AS
SELECT
    "userId",
    merchant,
    COUNT(*) AS transaction_count,
    SUM(ABS(amount)) AS total_spent,
    AVG(ABS(amount)) AS avg_transaction
FROM transactions
WHERE type = 'expense' AND merchant IS NOT NULL
GROUP BY "userId", merchant
ORDER BY total_spent DESC
"""


def view_statements(dialect_name: str) -> list[str]:
    """(Re)create the three analytics views for ``dialect_name``."""

    month = _MONTH_EXPR.get(dialect_name, _MONTH_EXPR[POSTGRES])
    stmts = drop_view_statements(dialect_name)
    stmts.append(_MONTHLY_SPENDING.format(month=month).strip())
    stmts.append(_DAILY_SPENDING.strip())
    stmts.append(_TOP_MERCHANTS.strip())
    return stmts


def drop_view_statements(dialect_name: str) -> list[str]:
    return [f"DROP VIEW IF EXISTS {v}" for v in VIEW_NAMES]


# ---------------------------
# create_all / drop_all wiring
# ---------------------------


def _execute_all(statements: Iterable[str], connection) -> None:
    for sql in statements:
        connection.exec_driver_sql(sql)


def install_ddl_events(metadata: MetaData) -> None:
    """Attach trigger, policy and view DDL to ``metadata`` create/drop events.

    Triggers follow each timestamped table; policies and views run once every
    table exists.
    """

    for name in TIMESTAMPED_TABLES:
        table = metadata.tables[name]
        for dialect_name in (POSTGRES, SQLITE):
            for sql in timestamp_trigger_statements(dialect_name, [name]):
                # DDL() treats "%" as a format marker
                event.listen(
                    table,
                    "after_create",
                    DDL(sql.replace("%", "%%")).execute_if(dialect=dialect_name),
                )

    @event.listens_for(metadata, "after_create")
    def _after_create(target, connection, **kw):
        name = connection.dialect.name
        _execute_all(rls_policy_statements(name), connection)
        _execute_all(view_statements(name), connection)

    @event.listens_for(metadata, "before_drop")
    def _before_drop(target, connection, **kw):
        _execute_all(drop_view_statements(connection.dialect.name), connection)


__all__ = [
    "CURRENT_USER_SETTING",
    "RLS_MODES",
    "RLS_OWNER",
    "RLS_PERMISSIVE",
    "VIEW_NAMES",
    "drop_rls_policy_statements",
    "drop_timestamp_trigger_statements",
    "drop_view_statements",
    "install_ddl_events",
    "policy_name",
    "resolve_rls_mode",
    "rls_policy_statements",
    "timestamp_trigger_statements",
    "trigger_name",
    "view_statements",
]
