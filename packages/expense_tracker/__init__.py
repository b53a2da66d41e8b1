"""Public interface for the ``expense_tracker`` package.

Symbol re-exports only; the schema lives in ``expense_db``.
"""

from .analytics import daily_spending, monthly_spending, top_merchants
from .demo import generate_demo_transactions
from .errors import ConfigurationError, DuplicateTransactionError, ExpenseTrackerError
from .models import (
    DailySpending,
    MerchantSpending,
    MonthlySpending,
    NewTransaction,
    RecordResult,
    SeedReport,
)
from .persistence import compute_dedupe_hash, insert_transaction, record_transaction
from .seed import seed, seed_all

__all__ = [
    # Operations
    "compute_dedupe_hash",
    "daily_spending",
    "generate_demo_transactions",
    "insert_transaction",
    "monthly_spending",
    "record_transaction",
    "seed",
    "seed_all",
    "top_merchants",
    # Models
    "DailySpending",
    "MerchantSpending",
    "MonthlySpending",
    "NewTransaction",
    "RecordResult",
    "SeedReport",
    # Errors
    "ConfigurationError",
    "DuplicateTransactionError",
    "ExpenseTrackerError",
]
