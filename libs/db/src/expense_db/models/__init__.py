"""SQLAlchemy models for the expense tracker schema.

Seven tables hang off ``users``: accounts, transactions, rules, uploads and
alerts are owned rows; categories are shared reference data.
"""

from .expense import (
    TABLE_ORDER,
    TIMESTAMPED_TABLES,
    Account,
    Alert,
    Base,
    Category,
    Rule,
    Transaction,
    Upload,
    User,
    new_id,
)

__all__ = [
    "Account",
    "Alert",
    "Base",
    "Category",
    "Rule",
    "TABLE_ORDER",
    "TIMESTAMPED_TABLES",
    "Transaction",
    "Upload",
    "User",
    "new_id",
]
