"""Enumerated value domains and the foreign-key deletion policy.

Both the ORM models and the Alembic migrations import from here so the CHECK
constraints and ``ON DELETE`` actions are declared exactly once.
"""

from __future__ import annotations

from collections.abc import Sequence

ACCOUNT_TYPES: tuple[str, ...] = (
    "checking",
    "savings",
    "credit_card",
    "investment",
    "cash",
    "other",
)
TRANSACTION_TYPES: tuple[str, ...] = ("income", "expense", "transfer")
TRANSACTION_STATUSES: tuple[str, ...] = ("pending", "processed", "verified", "disputed")
TRANSACTION_SOURCES: tuple[str, ...] = ("manual", "sms", "email", "csv_upload", "bank_api")
UPLOAD_TYPES: tuple[str, ...] = ("csv", "pdf", "image", "email", "sms")
UPLOAD_STATUSES: tuple[str, ...] = ("uploaded", "processing", "completed", "failed")
ALERT_TYPES: tuple[str, ...] = (
    "budget_exceeded",
    "unusual_spending",
    "low_balance",
    "large_transaction",
    "weekly_summary",
)
ALERT_SEVERITIES: tuple[str, ...] = ("info", "warning", "critical")


def in_check(column: str, values: Sequence[str]) -> str:
    """Render ``<column> IN ('a', 'b', ...)`` for a CHECK constraint.

    ``column`` is quoted so mixed-case names survive on Postgres.
    """

    quoted = ", ".join(f"'{v}'" for v in values)
    return f'"{column}" IN ({quoted})'


# ---------------------------
# Deletion policy
# ---------------------------

CASCADE = "CASCADE"
SET_NULL = "SET NULL"

# (child table, child column) -> (referenced "table.column", ON DELETE action).
# Owned rows go away with their owner; references to categories and accounts
# are optional annotation and fall back to NULL.
DELETION_POLICY: dict[tuple[str, str], tuple[str, str]] = {
    ("accounts", "userId"): ("users.id", CASCADE),
    ("categories", "parentId"): ("categories.id", SET_NULL),
    ("transactions", "userId"): ("users.id", CASCADE),
    ("transactions", "accountId"): ("accounts.id", SET_NULL),
    ("transactions", "categoryId"): ("categories.id", SET_NULL),
    ("transactions", "subcategoryId"): ("categories.id", SET_NULL),
    ("rules", "userId"): ("users.id", CASCADE),
    ("uploads", "userId"): ("users.id", CASCADE),
    ("alerts", "userId"): ("users.id", CASCADE),
    ("alerts", "categoryId"): ("categories.id", SET_NULL),
    ("alerts", "accountId"): ("accounts.id", SET_NULL),
}


def on_delete(table: str, column: str) -> str:
    """Return the ``ON DELETE`` action for ``table.column``."""

    return DELETION_POLICY[(table, column)][1]


def references(table: str, column: str) -> str:
    """Return the ``"table.column"`` target referenced by ``table.column``."""

    return DELETION_POLICY[(table, column)][0]


__all__ = [
    "ACCOUNT_TYPES",
    "ALERT_SEVERITIES",
    "ALERT_TYPES",
    "CASCADE",
    "DELETION_POLICY",
    "SET_NULL",
    "TRANSACTION_SOURCES",
    "TRANSACTION_STATUSES",
    "TRANSACTION_TYPES",
    "UPLOAD_STATUSES",
    "UPLOAD_TYPES",
    "in_check",
    "on_delete",
    "references",
]
