"""Pytest configuration for test isolation.

Tests share process-wide state: the engine cached by ``expense_db.client``
and the handler installed by ``expense_tracker.logging_setup``. Reset both
around each test and keep the developer's environment (``DATABASE_URL``,
``EXPENSE_DB_RLS_MODE``, a local ``.env``) out of the picture.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from expense_db.client import dispose_engine
from expense_tracker.logging_setup import reset_logging

from tests.helpers.db import bootstrap_sqlite_db


_ENV_VARS = ("DATABASE_URL", "EXPENSE_DB_RLS_MODE", "EXPENSE_TRACKER_LOG_LEVEL")


@pytest.fixture(autouse=True)
def _isolate_process_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    # The CLI reads .env from the working directory.
    monkeypatch.chdir(tmp_path)
    dispose_engine()
    reset_logging()
    yield
    dispose_engine()
    reset_logging()
    # load_dotenv() inside the CLI writes os.environ directly; monkeypatch
    # restores any pre-test values afterwards.
    for var in _ENV_VARS:
        os.environ.pop(var, None)


@pytest.fixture()
def db_url(tmp_path: Path) -> str:
    """URL of a fresh SQLite database built with ``metadata.create_all``."""

    return bootstrap_sqlite_db(tmp_path / "expenses.db")
