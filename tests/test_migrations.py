from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import text as sql_text

from expense_db import metadata
from expense_db.client import session_scope
from expense_db.ddl import VIEW_NAMES, trigger_name
from expense_db.models import TABLE_ORDER, TIMESTAMPED_TABLES

from tests.helpers.db import sqlite_objects, sqlite_url

_ALEMBIC_INI = Path(__file__).resolve().parents[1] / "libs" / "db" / "alembic.ini"


def _config(database_url: str) -> Config:
    cfg = Config(str(_ALEMBIC_INI))
    cfg.attributes["database_url"] = database_url
    return cfg


@pytest.fixture()
def migrated_url(tmp_path: Path) -> str:
    url = sqlite_url(tmp_path / "migrated.db")
    command.upgrade(_config(url), "head")
    return url


def test_revision_chain_is_linear() -> None:
    script = ScriptDirectory.from_config(_config("sqlite://"))
    assert script.get_heads() == ["0004_analytics_views"]
    revisions = [r.revision for r in script.walk_revisions("base", "heads")]
    assert revisions == [
        "0004_analytics_views",
        "0003_row_level_security",
        "0002_update_timestamp_triggers",
        "0001_expense_core",
    ]


def test_ini_uses_os_path_separator() -> None:
    assert Config(str(_ALEMBIC_INI)).get_main_option("path_separator") == "os"


def test_upgrade_builds_full_schema(migrated_url: str) -> None:
    tables = sqlite_objects(migrated_url, "table")
    assert set(TABLE_ORDER) | {"alembic_version"} <= tables
    assert set(VIEW_NAMES) <= sqlite_objects(migrated_url, "view")
    assert sqlite_objects(migrated_url, "trigger") == {
        trigger_name(t) for t in TIMESTAMPED_TABLES
    }

    expected_indexes = {
        ix.name for table in metadata.sorted_tables for ix in table.indexes if ix.name
    }
    assert expected_indexes <= sqlite_objects(migrated_url, "index")

    with session_scope(database_url=migrated_url) as s:
        version = s.execute(sql_text("SELECT version_num FROM alembic_version")).scalar()
    assert version == "0004_analytics_views"


def test_migrated_columns_match_models(migrated_url: str) -> None:
    with session_scope(database_url=migrated_url) as s:
        for name in TABLE_ORDER:
            rows = s.execute(sql_text(f"PRAGMA table_info('{name}')")).fetchall()
            got = {row[1] for row in rows}  # (cid, name, type, notnull, dflt_value, pk)
            expected = {c.name for c in metadata.tables[name].columns}
            assert got == expected, name


def test_downgrade_to_base_drops_everything(migrated_url: str) -> None:
    command.downgrade(_config(migrated_url), "base")

    assert sqlite_objects(migrated_url, "table") == {"alembic_version"}
    assert sqlite_objects(migrated_url, "view") == set()
    assert sqlite_objects(migrated_url, "trigger") == set()
