"""Readers for the analytics views.

The views (``monthly_spending``, ``daily_spending``, ``top_merchants``) are
created by ``expense_db``; these helpers select from them, optionally for one
user, and normalize driver-specific values (SQLite returns months and dates as
text and sums as floats) into ``date`` and cent-quantized ``Decimal``.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import column, select, table
from sqlalchemy.orm import Session

from .models import DailySpending, MerchantSpending, MonthlySpending, quantize_cents

_monthly = table(
    "monthly_spending",
    column("userId"),
    column("month"),
    column("category"),
    column("transaction_count"),
    column("total_amount"),
    column("avg_amount"),
)

_daily = table(
    "daily_spending",
    column("userId"),
    column("transactionDate"),
    column("transaction_count"),
    column("total_amount"),
)

_merchants = table(
    "top_merchants",
    column("userId"),
    column("merchant"),
    column("transaction_count"),
    column("total_spent"),
    column("avg_transaction"),
)


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def monthly_spending(session: Session, *, user_id: str | None = None) -> list[MonthlySpending]:
    """Expense totals per user, calendar month and category, newest month first."""

    stmt = select(_monthly)
    if user_id is not None:
        stmt = stmt.where(_monthly.c.userId == user_id)
    stmt = stmt.order_by(_monthly.c.month.desc(), _monthly.c.total_amount.desc())
    return [
        MonthlySpending(
            user_id=r.userId,
            month=_as_date(r.month),
            category=r.category,
            transaction_count=int(r.transaction_count),
            total_amount=quantize_cents(r.total_amount),
            avg_amount=quantize_cents(r.avg_amount),
        )
        for r in session.execute(stmt)
    ]


def daily_spending(session: Session, *, user_id: str | None = None) -> list[DailySpending]:
    stmt = select(_daily)
    if user_id is not None:
        stmt = stmt.where(_daily.c.userId == user_id)
    stmt = stmt.order_by(_daily.c.transactionDate.desc())
    return [
        DailySpending(
            user_id=r.userId,
            transaction_date=_as_date(r.transactionDate),
            transaction_count=int(r.transaction_count),
            total_amount=quantize_cents(r.total_amount),
        )
        for r in session.execute(stmt)
    ]


def top_merchants(
    session: Session, *, user_id: str | None = None, limit: int | None = None
) -> list[MerchantSpending]:
    """Merchants ranked by total expense spend."""

    stmt = select(_merchants)
    if user_id is not None:
        stmt = stmt.where(_merchants.c.userId == user_id)
    stmt = stmt.order_by(_merchants.c.total_spent.desc(), _merchants.c.merchant)
    if limit is not None:
        stmt = stmt.limit(limit)
    return [
        MerchantSpending(
            user_id=r.userId,
            merchant=r.merchant,
            transaction_count=int(r.transaction_count),
            total_spent=quantize_cents(r.total_spent),
            avg_transaction=quantize_cents(r.avg_transaction),
        )
        for r in session.execute(stmt)
    ]
