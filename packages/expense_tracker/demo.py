"""Random demo transactions for the demo user.

Fills ids ``txn_026`` onward with expenses from the last 30 days so the
analytics views have something current to show. Requires the seed
(categories, demo user and accounts) to be present.
"""

from __future__ import annotations

import random
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from expense_db.client import session_scope
from expense_db.models import Transaction

from .logging_setup import get_logger
from .persistence import compute_dedupe_hash, insert_missing_rows
from .seed import DEMO_CARD_ID, DEMO_CHECKING_ID, DEMO_USER_ID

logger = get_logger(__name__)

FIRST_DEMO_INDEX = 26
DEFAULT_DEMO_COUNT = 75

DEMO_MERCHANTS: tuple[str, ...] = (
    "SWIGGY", "ZOMATO", "UBER EATS", "MCDONALD'S", "KFC", "PIZZA HUT",
    "AMAZON", "FLIPKART", "MYNTRA", "AJIO", "NYKAA", "BIG BAZAAR",
    "UBER", "OLA", "RAPIDO", "METRO CARD", "INDIAN OIL", "HP PETROL",
    "NETFLIX", "HOTSTAR", "SPOTIFY", "YOUTUBE PREMIUM", "BOOKMYSHOW",
    "AIRTEL", "JIO", "VI", "BSNL", "ELECTRICITY BOARD", "GAS AGENCY",
    "APOLLO PHARMACY", "MEDPLUS", "CULT FIT", "GOLD'S GYM",
    "RENT PAYMENT", "MAINTENANCE", "GROCERY STORE", "VEGETABLE VENDOR",
)  # fmt: skip

DEMO_CATEGORIES: tuple[str, ...] = (
    "cat_food_dining",
    "cat_shopping",
    "cat_transportation",
    "cat_entertainment",
    "cat_bills_utilities",
    "cat_health_fitness",
    "cat_home",
    "cat_other",
)

DEMO_SOURCES: tuple[str, ...] = ("sms", "email", "manual", "csv_upload")

# Amount magnitude is uniform in [MIN, MIN + SPAN)
_AMOUNT_MIN = 50
_AMOUNT_SPAN = 5000
_DAY_WINDOW = 30
_CARD_THRESHOLD = 0.7


def demo_transaction_id(i: int) -> str:
    return f"txn_{i:03d}"


def build_demo_rows(
    count: int = DEFAULT_DEMO_COUNT,
    *,
    rng: random.Random | None = None,
    today: date | None = None,
    start: int = FIRST_DEMO_INDEX,
) -> list[dict[str, Any]]:
    """Build ``count`` random expense rows keyed by column name.

    Each row draws merchant, category, source, amount, date and account from
    ``rng`` in that order, so a seeded ``random.Random`` reproduces the batch.
    """

    if count < 0:
        raise ValueError("count must be >= 0")
    rng = rng or random.Random()
    today = today or date.today()

    rows: list[dict[str, Any]] = []
    for i in range(start, start + count):
        merchant = rng.choice(DEMO_MERCHANTS)
        category = rng.choice(DEMO_CATEGORIES)
        source = rng.choice(DEMO_SOURCES)
        magnitude = round(rng.random() * _AMOUNT_SPAN + _AMOUNT_MIN, 2)
        amount = -Decimal(f"{magnitude:.2f}")
        txn_date = today - timedelta(days=round(rng.random() * _DAY_WINDOW))
        account = DEMO_CARD_ID if rng.random() > _CARD_THRESHOLD else DEMO_CHECKING_ID
        rows.append(
            {
                "id": demo_transaction_id(i),
                "userId": DEMO_USER_ID,
                "accountId": account,
                "description": f"{merchant} TRANSACTION",
                "amount": amount,
                "transactionDate": txn_date,
                "merchant": merchant,
                "categoryId": category,
                "type": "expense",
                "dedupeHash": compute_dedupe_hash(merchant, amount, txn_date, suffix=i),
                "source": source,
            }
        )
    return rows


def generate_demo_transactions(
    session: Session,
    count: int = DEFAULT_DEMO_COUNT,
    *,
    rng: random.Random | None = None,
    today: date | None = None,
) -> int:
    """Insert random demo expenses; returns how many rows were added.

    Ids that already exist are skipped, so a second run keeps the first run's
    rows.
    """

    rows = build_demo_rows(count, rng=rng, today=today)
    inserted = insert_missing_rows(session, Transaction.__table__, rows)
    logger.info("Generated %d demo transactions (%d requested)", inserted, count)
    return inserted


def generate_all(
    count: int = DEFAULT_DEMO_COUNT,
    *,
    seed: int | None = None,
    database_url: str | None = None,
) -> int:
    rng = random.Random(seed)
    with session_scope(database_url=database_url) as session:
        return generate_demo_transactions(session, count, rng=rng)
