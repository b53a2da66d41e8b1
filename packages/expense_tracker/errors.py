"""Exceptions raised by ``expense_tracker``.

Database constraint violations other than a dedupe collision propagate as
``sqlalchemy.exc.IntegrityError``.
"""

from __future__ import annotations


class ExpenseTrackerError(Exception):
    """Base class for application errors."""


class ConfigurationError(ExpenseTrackerError):
    """Missing or invalid runtime configuration (``DATABASE_URL``, RLS mode)."""


class DuplicateTransactionError(ExpenseTrackerError):
    """A transaction with the same ``dedupeHash`` is already recorded."""

    def __init__(self, dedupe_hash: str, existing_id: str) -> None:
        super().__init__(
            f"transaction with dedupeHash {dedupe_hash!r} already recorded as {existing_id!r}"
        )
        self.dedupe_hash = dedupe_hash
        self.existing_id = existing_id
