"""Default reference data and the demo account.

Seeds the 15 default categories, one demo user with two accounts, and 25
fixed demo transactions for January 2024. Every insert skips ids that are
already present, so running the seed twice leaves one row per id.

Usage (example)::

    expense-tracker seed --database-url sqlite:///expenses.db
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from expense_db.client import session_scope
from expense_db.models import Account, Category, Transaction, User

from .logging_setup import get_logger
from .models import SeedReport
from .persistence import insert_missing_rows

logger = get_logger(__name__)

DEMO_USER_ID = "demo_user_1"
DEMO_CHECKING_ID = "demo_account_1"
DEMO_CARD_ID = "demo_account_2"

# (id, name, description, color, icon)
DEFAULT_CATEGORIES: tuple[tuple[str, str, str, str, str], ...] = (
    ("cat_food_dining", "Food & Dining", "Restaurants, groceries, food delivery", "#ef4444", "🍽️"),
    ("cat_shopping", "Shopping", "Clothing, electronics, general merchandise", "#8b5cf6", "🛍️"),
    ("cat_transportation", "Transportation", "Gas, public transit, ride sharing", "#06b6d4", "🚗"),
    ("cat_travel", "Travel", "Flights, hotels, car rentals", "#10b981", "✈️"),
    ("cat_entertainment", "Entertainment", "Movies, concerts, subscriptions", "#f59e0b", "🎬"),
    (
        "cat_bills_utilities",
        "Bills & Utilities",
        "Electricity, water, internet, phone",
        "#6b7280",
        "⚡",
    ),
    ("cat_health_fitness", "Health & Fitness", "Medical expenses, gym, pharmacy", "#ec4899", "🏥"),
    ("cat_education", "Education", "Tuition, books, courses", "#3b82f6", "📚"),
    ("cat_personal_care", "Personal Care", "Haircuts, spa, beauty products", "#a855f7", "💅"),
    ("cat_home", "Home", "Rent, mortgage, furniture, maintenance", "#059669", "🏠"),
    ("cat_gifts_donations", "Gifts & Donations", "Charity, presents", "#dc2626", "🎁"),
    (
        "cat_business",
        "Business Expenses",
        "Office supplies, software subscriptions",
        "#7c3aed",
        "💼",
    ),
    ("cat_income", "Income", "Salary, freelance, investments", "#16a34a", "💰"),
    ("cat_transfer", "Transfer", "Account transfers, credit card payments", "#64748b", "🔄"),
    ("cat_other", "Other", "Miscellaneous expenses", "#78716c", "❓"),
)

# (id, account, description, amount, date, merchant, category, type, dedupeHash, source)
DEMO_TRANSACTIONS: tuple[tuple[str, str, str, str, str, str, str, str, str, str], ...] = (
    # Food & Dining
    ("txn_001", DEMO_CHECKING_ID, "SWIGGY FOOD DELIVERY", "-450.00", "2024-01-15", "Swiggy",
     "cat_food_dining", "expense", "hash_swiggy_450_20240115", "sms"),
    ("txn_002", DEMO_CHECKING_ID, "ZOMATO FOOD ORDER", "-380.00", "2024-01-14", "Zomato",
     "cat_food_dining", "expense", "hash_zomato_380_20240114", "sms"),
    ("txn_003", DEMO_CHECKING_ID, "RELIANCE FRESH GROCERIES", "-2500.00", "2024-01-13",
     "Reliance Fresh", "cat_food_dining", "expense", "hash_reliance_2500_20240113", "manual"),
    ("txn_004", DEMO_CHECKING_ID, "STARBUCKS COFFEE", "-250.00", "2024-01-12", "Starbucks",
     "cat_food_dining", "expense", "hash_starbucks_250_20240112", "manual"),
    ("txn_005", DEMO_CHECKING_ID, "DOMINOS PIZZA", "-720.00", "2024-01-11", "Dominos",
     "cat_food_dining", "expense", "hash_dominos_720_20240111", "sms"),
    # Transportation
    ("txn_006", DEMO_CHECKING_ID, "UBER RIDE", "-180.00", "2024-01-15", "Uber",
     "cat_transportation", "expense", "hash_uber_180_20240115", "sms"),
    ("txn_007", DEMO_CHECKING_ID, "OLA CAB SERVICE", "-220.00", "2024-01-14", "Ola",
     "cat_transportation", "expense", "hash_ola_220_20240114", "sms"),
    ("txn_008", DEMO_CHECKING_ID, "METRO CARD RECHARGE", "-500.00", "2024-01-13", "Delhi Metro",
     "cat_transportation", "expense", "hash_metro_500_20240113", "manual"),
    ("txn_009", DEMO_CHECKING_ID, "PETROL PUMP", "-3000.00", "2024-01-12", "Indian Oil",
     "cat_transportation", "expense", "hash_petrol_3000_20240112", "manual"),
    # Shopping
    ("txn_010", DEMO_CARD_ID, "AMAZON PURCHASE", "-1299.00", "2024-01-15", "Amazon",
     "cat_shopping", "expense", "hash_amazon_1299_20240115", "email"),
    ("txn_011", DEMO_CARD_ID, "FLIPKART ORDER", "-899.00", "2024-01-14", "Flipkart",
     "cat_shopping", "expense", "hash_flipkart_899_20240114", "email"),
    ("txn_012", DEMO_CHECKING_ID, "MYNTRA CLOTHING", "-2500.00", "2024-01-13", "Myntra",
     "cat_shopping", "expense", "hash_myntra_2500_20240113", "manual"),
    ("txn_013", DEMO_CHECKING_ID, "BIG BAZAAR", "-1800.00", "2024-01-12", "Big Bazaar",
     "cat_shopping", "expense", "hash_bigbazaar_1800_20240112", "manual"),
    # Entertainment
    ("txn_014", DEMO_CHECKING_ID, "NETFLIX SUBSCRIPTION", "-799.00", "2024-01-15", "Netflix",
     "cat_entertainment", "expense", "hash_netflix_799_20240115", "email"),
    ("txn_015", DEMO_CHECKING_ID, "SPOTIFY PREMIUM", "-119.00", "2024-01-14", "Spotify",
     "cat_entertainment", "expense", "hash_spotify_119_20240114", "email"),
    ("txn_016", DEMO_CHECKING_ID, "MOVIE TICKET BOOKMYSHOW", "-400.00", "2024-01-13",
     "BookMyShow", "cat_entertainment", "expense", "hash_bms_400_20240113", "manual"),
    ("txn_017", DEMO_CHECKING_ID, "AMAZON PRIME VIDEO", "-999.00", "2024-01-12", "Amazon Prime",
     "cat_entertainment", "expense", "hash_prime_999_20240112", "email"),
    # Bills & Utilities
    ("txn_018", DEMO_CHECKING_ID, "ELECTRICITY BILL", "-2800.00", "2024-01-15", "BSES Delhi",
     "cat_bills_utilities", "expense", "hash_electric_2800_20240115", "email"),
    ("txn_019", DEMO_CHECKING_ID, "AIRTEL POSTPAID", "-699.00", "2024-01-14", "Airtel",
     "cat_bills_utilities", "expense", "hash_airtel_699_20240114", "sms"),
    ("txn_020", DEMO_CHECKING_ID, "JIO FIBER INTERNET", "-999.00", "2024-01-13", "Jio",
     "cat_bills_utilities", "expense", "hash_jio_999_20240113", "email"),
    # Income
    ("txn_021", DEMO_CHECKING_ID, "SALARY CREDIT", "75000.00", "2024-01-01", "TCS Ltd",
     "cat_income", "income", "hash_salary_75000_20240101", "email"),
    ("txn_022", DEMO_CHECKING_ID, "FREELANCE PROJECT", "15000.00", "2024-01-10",
     "Client Payment", "cat_income", "income", "hash_freelance_15000_20240110", "manual"),
    # Health & Fitness
    ("txn_023", DEMO_CHECKING_ID, "CULT FIT MEMBERSHIP", "-2499.00", "2024-01-15", "Cult.fit",
     "cat_health_fitness", "expense", "hash_cultfit_2499_20240115", "manual"),
    ("txn_024", DEMO_CHECKING_ID, "APOLLO PHARMACY", "-450.00", "2024-01-14", "Apollo",
     "cat_health_fitness", "expense", "hash_apollo_450_20240114", "manual"),
    ("txn_025", DEMO_CHECKING_ID, "DR CONSULTATION", "-800.00", "2024-01-13", "Fortis Hospital",
     "cat_health_fitness", "expense", "hash_doctor_800_20240113", "manual"),
)


def category_rows() -> list[dict[str, Any]]:
    return [
        {"id": cid, "name": name, "description": desc, "color": color, "icon": icon}
        for cid, name, desc, color, icon in DEFAULT_CATEGORIES
    ]


def user_rows() -> list[dict[str, Any]]:
    return [
        {
            "id": DEMO_USER_ID,
            "email": "demo@example.com",
            "firstName": "Demo",
            "lastName": "User",
            "onboardingCompleted": True,
        }
    ]


def account_rows() -> list[dict[str, Any]]:
    return [
        {
            "id": DEMO_CHECKING_ID,
            "userId": DEMO_USER_ID,
            "name": "HDFC Checking",
            "type": "checking",
            "balance": Decimal("25000.00"),
        },
        {
            "id": DEMO_CARD_ID,
            "userId": DEMO_USER_ID,
            "name": "ICICI Credit Card",
            "type": "credit_card",
            "balance": Decimal("-5000.00"),
        },
    ]


def transaction_rows() -> list[dict[str, Any]]:
    rows = []
    for tid, account, desc, amount, day, merchant, category, kind, dedupe, source in (
        DEMO_TRANSACTIONS
    ):
        rows.append(
            {
                "id": tid,
                "userId": DEMO_USER_ID,
                "accountId": account,
                "description": desc,
                "amount": Decimal(amount),
                "transactionDate": date.fromisoformat(day),
                "merchant": merchant,
                "categoryId": category,
                "type": kind,
                "dedupeHash": dedupe,
                "source": source,
            }
        )
    return rows


def seed_categories(session: Session) -> int:
    return insert_missing_rows(session, Category.__table__, category_rows())


def seed_demo_user(session: Session) -> dict[str, int]:
    """Demo user, its two accounts and the 25 fixed transactions."""

    return {
        "users": insert_missing_rows(session, User.__table__, user_rows()),
        "accounts": insert_missing_rows(session, Account.__table__, account_rows()),
        "transactions": insert_missing_rows(session, Transaction.__table__, transaction_rows()),
    }


def seed(session: Session) -> SeedReport:
    inserted = {"categories": seed_categories(session)}
    inserted.update(seed_demo_user(session))
    report = SeedReport(inserted=inserted)
    logger.info(
        "Seeded %d rows (%s)",
        report.total,
        ", ".join(f"{k}={v}" for k, v in inserted.items()),
    )
    return report


def seed_all(*, database_url: str | None = None) -> SeedReport:
    """Run :func:`seed` in its own transaction."""

    with session_scope(database_url=database_url) as session:
        return seed(session)
