from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    FetchedValue,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from .domains import (
    ACCOUNT_TYPES,
    ALERT_SEVERITIES,
    ALERT_TYPES,
    TRANSACTION_SOURCES,
    TRANSACTION_STATUSES,
    TRANSACTION_TYPES,
    UPLOAD_STATUSES,
    UPLOAD_TYPES,
    in_check,
    on_delete,
    references,
)

# JSONB on Postgres, plain JSON on SQLite for local/tests.
JsonBlob = JSON().with_variant(postgresql.JSONB(astext_type=Text()), "postgresql")


def new_id() -> str:
    return str(uuid4())


def _owned_fk(table: str, column: str) -> ForeignKey:
    return ForeignKey(references(table, column), ondelete=on_delete(table, column))


def _created_at() -> Mapped[datetime]:
    return mapped_column(
        "createdAt", DateTime(timezone=True), nullable=True, server_default=func.now()
    )


def _updated_at() -> Mapped[datetime]:
    # Written by the update_<table>_timestamp trigger; the ORM only reads it back.
    return mapped_column(
        "updatedAt",
        DateTime(timezone=True),
        nullable=True,
        server_default=func.now(),
        server_onupdate=FetchedValue(),
    )


class Base(DeclarativeBase):
    pass


# ---------------------------
# Root: users
# ---------------------------


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[str | None] = mapped_column("firstName", Text)
    last_name: Mapped[str | None] = mapped_column("lastName", Text)
    phone: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool | None] = mapped_column(
        "isActive", Boolean, server_default=text("true")
    )
    email_verified: Mapped[bool | None] = mapped_column(
        "emailVerified", Boolean, server_default=text("false")
    )
    onboarding_completed: Mapped[bool | None] = mapped_column(
        "onboardingCompleted", Boolean, server_default=text("false")
    )
    preferences: Mapped[dict[str, Any] | None] = mapped_column(
        JsonBlob, server_default=text("'{}'")
    )
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    # The database cascades deletes to owned rows; the ORM does not issue its own.
    accounts: Mapped[list[Account]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    transactions: Mapped[list[Transaction]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    rules: Mapped[list[Rule]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    uploads: Mapped[list[Upload]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    alerts: Mapped[list[Alert]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)


# ---------------------------
# Reference: categories (two-level tree via parentId)
# ---------------------------


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    parent_id: Mapped[str | None] = mapped_column(
        "parentId", Text, _owned_fk("categories", "parentId")
    )
    description: Mapped[str | None] = mapped_column(Text)
    color: Mapped[str | None] = mapped_column(Text, server_default=text("'#6b7280'"))
    icon: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool | None] = mapped_column(
        "isActive", Boolean, server_default=text("true")
    )
    created_at: Mapped[datetime] = _created_at()

    parent: Mapped[Category | None] = relationship(
        remote_side="Category.id", back_populates="children"
    )
    children: Mapped[list[Category]] = relationship(
        back_populates="parent", passive_deletes=True
    )

    __table_args__ = (UniqueConstraint("name", name="uq_categories_name"),)


# ---------------------------
# Owned: accounts
# ---------------------------


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        "userId", Text, _owned_fk("accounts", "userId"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    account_number: Mapped[str | None] = mapped_column("accountNumber", Text)
    routing_number: Mapped[str | None] = mapped_column("routingNumber", Text)
    # Stored as reported by the institution; never recomputed from transactions.
    balance: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), server_default=text("0"))
    currency: Mapped[str | None] = mapped_column(Text, server_default=text("'USD'"))
    is_active: Mapped[bool | None] = mapped_column(
        "isActive", Boolean, server_default=text("true")
    )
    last_synced: Mapped[datetime | None] = mapped_column("lastSynced", DateTime(timezone=True))
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    user: Mapped[User] = relationship(back_populates="accounts")

    __table_args__ = (CheckConstraint(in_check("type", ACCOUNT_TYPES), name="ck_accounts_type"),)


# ---------------------------
# Core: transactions
# ---------------------------


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        "userId", Text, _owned_fk("transactions", "userId"), nullable=False
    )
    account_id: Mapped[str | None] = mapped_column(
        "accountId", Text, _owned_fk("transactions", "accountId")
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    transaction_date: Mapped[date] = mapped_column("transactionDate", Date, nullable=False)
    merchant: Mapped[str | None] = mapped_column(Text)
    category_id: Mapped[str | None] = mapped_column(
        "categoryId", Text, _owned_fk("transactions", "categoryId")
    )
    subcategory_id: Mapped[str | None] = mapped_column(
        "subcategoryId", Text, _owned_fk("transactions", "subcategoryId")
    )
    type: Mapped[str] = mapped_column(Text, nullable=False)
    # Sole duplicate-ingestion guard: a second insert with the same hash fails.
    dedupe_hash: Mapped[str] = mapped_column("dedupeHash", Text, nullable=False)
    original_description: Mapped[str | None] = mapped_column("originalDescription", Text)
    notes: Mapped[str | None] = mapped_column(Text)
    location: Mapped[str | None] = mapped_column(Text)
    reference: Mapped[str | None] = mapped_column(Text)

    # ML/AI classification
    ml_category: Mapped[str | None] = mapped_column("mlCategory", Text)
    ml_confidence: Mapped[Decimal | None] = mapped_column("mlConfidence", Numeric(5, 2))
    ml_explanation: Mapped[str | None] = mapped_column("mlExplanation", Text)
    ai_suggested: Mapped[bool | None] = mapped_column(
        "aiSuggested", Boolean, server_default=text("false")
    )
    user_corrected: Mapped[bool | None] = mapped_column(
        "userCorrected", Boolean, server_default=text("false")
    )

    # Processing status
    status: Mapped[str | None] = mapped_column(Text, server_default=text("'pending'"))
    processing_notes: Mapped[str | None] = mapped_column("processingNotes", Text)

    # Source tracking (SMS/email/upload message the row came from)
    source: Mapped[str | None] = mapped_column(Text, server_default=text("'manual'"))
    source_id: Mapped[str | None] = mapped_column("sourceId", Text)
    raw_data: Mapped[dict[str, Any] | None] = mapped_column("rawData", JsonBlob)

    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    user: Mapped[User] = relationship(back_populates="transactions")
    account: Mapped[Account | None] = relationship()
    category: Mapped[Category | None] = relationship(foreign_keys=[category_id])
    subcategory: Mapped[Category | None] = relationship(foreign_keys=[subcategory_id])

    __table_args__ = (
        UniqueConstraint("dedupeHash", name="uq_transactions_dedupe_hash"),
        CheckConstraint(in_check("type", TRANSACTION_TYPES), name="ck_transactions_type"),
        CheckConstraint(in_check("status", TRANSACTION_STATUSES), name="ck_transactions_status"),
        CheckConstraint(in_check("source", TRANSACTION_SOURCES), name="ck_transactions_source"),
    )


# ---------------------------
# Owned: rules (auto-categorization; evaluated outside the database)
# ---------------------------


class Rule(Base):
    __tablename__ = "rules"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        "userId", Text, _owned_fk("rules", "userId"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    conditions: Mapped[dict[str, Any]] = mapped_column(JsonBlob, nullable=False)
    actions: Mapped[dict[str, Any]] = mapped_column(JsonBlob, nullable=False)
    priority: Mapped[int | None] = mapped_column(Integer, server_default=text("0"))
    is_active: Mapped[bool | None] = mapped_column(
        "isActive", Boolean, server_default=text("true")
    )
    match_count: Mapped[int | None] = mapped_column(
        "matchCount", Integer, server_default=text("0")
    )
    last_matched: Mapped[datetime | None] = mapped_column(
        "lastMatched", DateTime(timezone=True)
    )
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    user: Mapped[User] = relationship(back_populates="rules")


# ---------------------------
# Owned: uploads (file processing tracking)
# ---------------------------


class Upload(Base):
    __tablename__ = "uploads"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        "userId", Text, _owned_fk("uploads", "userId"), nullable=False
    )
    filename: Mapped[str] = mapped_column(Text, nullable=False)
    original_name: Mapped[str] = mapped_column("originalName", Text, nullable=False)
    file_size: Mapped[int | None] = mapped_column("fileSize", Integer)
    mime_type: Mapped[str | None] = mapped_column("mimeType", Text)
    file_url: Mapped[str | None] = mapped_column("fileUrl", Text)
    type: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str | None] = mapped_column(Text, server_default=text("'uploaded'"))
    # Counters are advanced by the processing job; the schema does not order them.
    processed_rows: Mapped[int | None] = mapped_column(
        "processedRows", Integer, server_default=text("0")
    )
    total_rows: Mapped[int | None] = mapped_column(
        "totalRows", Integer, server_default=text("0")
    )
    error_count: Mapped[int | None] = mapped_column(
        "errorCount", Integer, server_default=text("0")
    )
    errors: Mapped[Any | None] = mapped_column(JsonBlob)
    # ``metadata`` is reserved on declarative classes
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JsonBlob)
    processed_at: Mapped[datetime | None] = mapped_column(
        "processedAt", DateTime(timezone=True)
    )
    created_at: Mapped[datetime] = _created_at()

    user: Mapped[User] = relationship(back_populates="uploads")

    __table_args__ = (
        CheckConstraint(in_check("type", UPLOAD_TYPES), name="ck_uploads_type"),
        CheckConstraint(in_check("status", UPLOAD_STATUSES), name="ck_uploads_status"),
    )


# ---------------------------
# Owned: alerts (budget alerts, notifications)
# ---------------------------


class Alert(Base):
    __tablename__ = "alerts"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        "userId", Text, _owned_fk("alerts", "userId"), nullable=False
    )
    type: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    category_id: Mapped[str | None] = mapped_column(
        "categoryId", Text, _owned_fk("alerts", "categoryId")
    )
    account_id: Mapped[str | None] = mapped_column(
        "accountId", Text, _owned_fk("alerts", "accountId")
    )
    threshold: Mapped[Decimal | None] = mapped_column(Numeric(15, 2))
    current_value: Mapped[Decimal | None] = mapped_column("currentValue", Numeric(15, 2))
    severity: Mapped[str | None] = mapped_column(Text, server_default=text("'info'"))
    is_read: Mapped[bool | None] = mapped_column("isRead", Boolean, server_default=text("false"))
    is_active: Mapped[bool | None] = mapped_column(
        "isActive", Boolean, server_default=text("true")
    )
    triggered_at: Mapped[datetime | None] = mapped_column(
        "triggeredAt", DateTime(timezone=True), server_default=func.now()
    )
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JsonBlob)

    user: Mapped[User] = relationship(back_populates="alerts")
    category: Mapped[Category | None] = relationship()
    account: Mapped[Account | None] = relationship()

    __table_args__ = (
        CheckConstraint(in_check("type", ALERT_TYPES), name="ck_alerts_type"),
        CheckConstraint(in_check("severity", ALERT_SEVERITIES), name="ck_alerts_severity"),
    )


# ---------------------------
# Indexes (names match the SQL setup script)
# ---------------------------

Index("idx_users_email", User.email)
Index("idx_users_active", User.is_active)

Index("idx_accounts_user", Account.user_id)
Index("idx_accounts_type", Account.type)
Index("idx_accounts_active", Account.is_active)

Index("idx_categories_parent", Category.parent_id)
Index("idx_categories_active", Category.is_active)
Index("idx_categories_name", Category.name)

Index("idx_transactions_user", Transaction.user_id)
Index("idx_transactions_account", Transaction.account_id)
Index("idx_transactions_category", Transaction.category_id)
Index("idx_transactions_date", Transaction.transaction_date.desc())
Index("idx_transactions_amount", Transaction.amount)
Index("idx_transactions_type", Transaction.type)
Index("idx_transactions_status", Transaction.status)
Index("idx_transactions_source", Transaction.source)
Index("idx_transactions_dedupe", Transaction.dedupe_hash)
Index("idx_transactions_ml_confidence", Transaction.ml_confidence)
Index("idx_transactions_created", Transaction.created_at.desc())
Index(
    "idx_transactions_user_date", Transaction.user_id, Transaction.transaction_date.desc()
)
Index("idx_transactions_user_category", Transaction.user_id, Transaction.category_id)
Index("idx_transactions_user_status", Transaction.user_id, Transaction.status)

Index("idx_rules_user", Rule.user_id)
Index("idx_rules_active", Rule.is_active)
Index("idx_rules_priority", Rule.priority.desc())

Index("idx_uploads_user", Upload.user_id)
Index("idx_uploads_status", Upload.status)
Index("idx_uploads_type", Upload.type)
Index("idx_uploads_created", Upload.created_at.desc())

Index("idx_alerts_user", Alert.user_id)
Index("idx_alerts_type", Alert.type)
Index("idx_alerts_read", Alert.is_read)
Index("idx_alerts_active", Alert.is_active)
Index("idx_alerts_triggered", Alert.triggered_at.desc())


# Tables that carry an ``updatedAt`` column maintained by trigger.
TIMESTAMPED_TABLES: tuple[str, ...] = ("users", "accounts", "transactions", "rules")

# Creation order follows the ownership graph.
TABLE_ORDER: tuple[str, ...] = (
    "users",
    "categories",
    "accounts",
    "transactions",
    "rules",
    "uploads",
    "alerts",
)


__all__ = [
    "Account",
    "Alert",
    "Base",
    "Category",
    "JsonBlob",
    "Rule",
    "TABLE_ORDER",
    "TIMESTAMPED_TABLES",
    "Transaction",
    "Upload",
    "User",
    "new_id",
]
