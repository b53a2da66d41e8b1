"""expense_db: shared database library (SQLAlchemy/Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``expense_db.models.expense`` (re-exported for convenience)
- Engine/session helpers in ``expense_db.client``

Importing the package attaches the trigger, policy and view DDL from
``expense_db.ddl`` to ``metadata``, so ``metadata.create_all()`` builds the
complete schema.
"""

from __future__ import annotations

from .ddl import install_ddl_events
from .models.expense import (
    Account,
    Alert,
    Base,
    Category,
    Rule,
    Transaction,
    Upload,
    User,
)

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

install_ddl_events(metadata)

__all__ = [
    "Account",
    "Alert",
    "Base",
    "Category",
    "Rule",
    "Transaction",
    "Upload",
    "User",
    "metadata",
]
