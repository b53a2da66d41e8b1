"""Data models for ``expense_tracker``.

``NewTransaction`` validates a transaction payload before any SQL runs. The
frozen dataclasses are plain result carriers handed back by persistence,
seeding and the analytics readers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from expense_db.models import Transaction
from expense_db.models.domains import (
    TRANSACTION_SOURCES,
    TRANSACTION_STATUSES,
    TRANSACTION_TYPES,
)

CENTS = Decimal("0.01")
# NUMERIC(15,2): 13 integer digits
_MAX_AMOUNT = Decimal("10000000000000")


def quantize_cents(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Input payloads
# ---------------------------------------------------------------------------


class NewTransaction(BaseModel):
    """A transaction about to be recorded.

    ``dedupe_hash`` may be omitted; persistence then derives one from the
    merchant (or description), amount and date. Amounts are signed: negative
    for money going out.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    id: str | None = None
    user_id: str
    account_id: str | None = None
    description: str
    amount: Decimal
    transaction_date: date
    merchant: str | None = None
    category_id: str | None = None
    subcategory_id: str | None = None
    type: str
    dedupe_hash: str | None = None
    status: str = "pending"
    source: str = "manual"
    source_id: str | None = None
    original_description: str | None = None
    notes: str | None = None
    location: str | None = None
    reference: str | None = None
    raw_data: dict[str, Any] | None = None

    @field_validator("user_id", "description")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must be non-empty")
        return v

    @field_validator("amount")
    @classmethod
    def _two_decimal_places(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("amount must be a finite number")
        q = quantize_cents(v)
        if abs(q) >= _MAX_AMOUNT:
            raise ValueError("amount exceeds NUMERIC(15,2)")
        return q

    @field_validator("type")
    @classmethod
    def _known_type(cls, v: str) -> str:
        if v not in TRANSACTION_TYPES:
            raise ValueError(f"type must be one of {list(TRANSACTION_TYPES)}")
        return v

    @field_validator("status")
    @classmethod
    def _known_status(cls, v: str) -> str:
        if v not in TRANSACTION_STATUSES:
            raise ValueError(f"status must be one of {list(TRANSACTION_STATUSES)}")
        return v

    @field_validator("source")
    @classmethod
    def _known_source(cls, v: str) -> str:
        if v not in TRANSACTION_SOURCES:
            raise ValueError(f"source must be one of {list(TRANSACTION_SOURCES)}")
        return v


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RecordResult:
    """Outcome of :func:`expense_tracker.persistence.record_transaction`.

    ``created`` is ``False`` when the dedupe hash was already recorded; then
    ``transaction`` is the row that was there first.
    """

    transaction: Transaction
    created: bool


@dataclass(frozen=True, slots=True)
class SeedReport:
    """Rows inserted per table by one seeding run (already-present rows excluded)."""

    inserted: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.inserted.values())


@dataclass(frozen=True, slots=True)
class MonthlySpending:
    user_id: str
    month: date
    category: str
    transaction_count: int
    total_amount: Decimal
    avg_amount: Decimal


@dataclass(frozen=True, slots=True)
class DailySpending:
    user_id: str
    transaction_date: date
    transaction_count: int
    total_amount: Decimal


@dataclass(frozen=True, slots=True)
class MerchantSpending:
    user_id: str
    merchant: str
    transaction_count: int
    total_spent: Decimal
    avg_transaction: Decimal
