# ruff: noqa: I001
"""Persistence helpers for ``expense_tracker``.

Functions here write to the shared database owned by ``libs/db``. They rely on
the ORM models in ``expense_db.models`` and a session from ``expense_db.client``.

Scope:
- Fingerprint a transaction into the ``dedupeHash`` format used by the seeds.
- Insert one transaction, turning a dedupe collision into
  :class:`~expense_tracker.errors.DuplicateTransactionError`.
- Bulk insert rows keyed by ``id`` while skipping ids that already exist.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import Table, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from expense_db.models import Transaction
from .errors import ConfigurationError, DuplicateTransactionError
from .logging_setup import get_logger
from .models import NewTransaction, RecordResult, quantize_cents

logger = get_logger(__name__)


def compute_dedupe_hash(
    merchant_or_description: str,
    amount: Decimal | float | int | str,
    transaction_date: date,
    suffix: str | int | None = None,
) -> str:
    """Return ``hash_<merchant>_<abs amount>_<YYYYMMDD>[_<suffix>]``.

    The amount is rendered unsigned with two decimals, so a debit and a credit
    of the same size on the same day for the same merchant collide.
    """

    label = (merchant_or_description or "").strip()
    magnitude = abs(quantize_cents(amount))
    parts = ["hash", label, f"{magnitude:.2f}", transaction_date.strftime("%Y%m%d")]
    if suffix is not None:
        parts.append(str(suffix))
    return "_".join(parts)


def _coerce(payload: NewTransaction | Mapping[str, Any]) -> NewTransaction:
    if isinstance(payload, NewTransaction):
        return payload
    return NewTransaction.model_validate(dict(payload))


def _to_row(tx: NewTransaction, dedupe_hash: str) -> Transaction:
    row = Transaction(
        user_id=tx.user_id,
        account_id=tx.account_id,
        description=tx.description,
        amount=tx.amount,
        transaction_date=tx.transaction_date,
        merchant=tx.merchant,
        category_id=tx.category_id,
        subcategory_id=tx.subcategory_id,
        type=tx.type,
        dedupe_hash=dedupe_hash,
        status=tx.status,
        source=tx.source,
        source_id=tx.source_id,
        original_description=tx.original_description,
        notes=tx.notes,
        location=tx.location,
        reference=tx.reference,
        raw_data=tx.raw_data,
    )
    if tx.id is not None:
        row.id = tx.id
    return row


def find_by_dedupe_hash(session: Session, dedupe_hash: str) -> Transaction | None:
    stmt = select(Transaction).where(Transaction.dedupe_hash == dedupe_hash)
    return session.scalars(stmt).first()


def insert_transaction(
    session: Session, payload: NewTransaction | Mapping[str, Any]
) -> Transaction:
    """Insert one transaction and flush it.

    The insert runs inside a SAVEPOINT so a rejected row leaves the caller's
    transaction usable. A unique violation on ``dedupeHash`` becomes
    :class:`DuplicateTransactionError`; any other integrity failure (foreign
    key, CHECK) propagates unchanged.
    """

    tx = _coerce(payload)
    dedupe_hash = tx.dedupe_hash or compute_dedupe_hash(
        tx.merchant or tx.description, tx.amount, tx.transaction_date
    )
    row = _to_row(tx, dedupe_hash)
    try:
        with session.begin_nested():
            session.add(row)
            session.flush()
    except IntegrityError as exc:
        existing = find_by_dedupe_hash(session, dedupe_hash)
        if existing is None:
            raise
        raise DuplicateTransactionError(dedupe_hash, existing.id) from exc
    logger.debug("Inserted transaction %s (dedupeHash=%s)", row.id, dedupe_hash)
    return row


def record_transaction(
    session: Session, payload: NewTransaction | Mapping[str, Any]
) -> RecordResult:
    """Insert a transaction, treating a dedupe collision as "already recorded"."""

    try:
        row = insert_transaction(session, payload)
    except DuplicateTransactionError as dup:
        logger.info(
            "Transaction already recorded: dedupeHash=%s existing=%s",
            dup.dedupe_hash,
            dup.existing_id,
        )
        existing = session.get(Transaction, dup.existing_id)
        assert existing is not None  # found by the duplicate lookup
        return RecordResult(transaction=existing, created=False)
    return RecordResult(transaction=row, created=True)


def _dialect_insert(session: Session, table: Table):
    name = session.get_bind().dialect.name
    if name == "postgresql":
        return pg_insert(table)
    if name == "sqlite":
        return sqlite_insert(table)
    raise ConfigurationError(f"Unsupported database dialect for seeding: {name!r}")


def insert_missing_rows(
    session: Session, table: Table, rows: Sequence[Mapping[str, Any]]
) -> int:
    """Insert ``rows`` (keyed by column name) whose ``id`` is not present yet.

    Uses ``INSERT ... ON CONFLICT (id) DO NOTHING`` so concurrent runs do not
    fail either. Returns the number of rows this call added, taken from
    ``RETURNING`` so ids written by someone else after the pre-check are not
    counted.
    """

    if not rows:
        return 0
    ids = [r["id"] for r in rows]
    present = set(session.scalars(select(table.c.id).where(table.c.id.in_(ids))))
    missing = [dict(r) for r in rows if r["id"] not in present]
    if not missing:
        return 0
    stmt = (
        _dialect_insert(session, table)
        .on_conflict_do_nothing(index_elements=["id"])
        .returning(table.c.id)
    )
    added = session.scalars(stmt, missing).all()
    if len(added) < len(missing):
        logger.info(
            "%s: %d of %d rows already existed", table.name, len(missing) - len(added), len(missing)
        )
    return len(added)
