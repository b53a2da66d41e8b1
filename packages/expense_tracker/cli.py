# ruff: noqa: I001
"""CLI for the ``expense_tracker`` package.

Environment variables (notably ``DATABASE_URL``) are loaded from a local
``.env`` using ``python-dotenv`` before any command runs. Every command accepts
``--database-url`` to override the environment. Business logic lives in
``expense_tracker.seed``, ``expense_tracker.demo`` and
``expense_tracker.analytics``; schema and sessions in ``expense_db``.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from sqlalchemy import func, select

from expense_db import metadata
from expense_db.client import dispose_engine, get_engine, session_scope
from expense_db.ddl import VIEW_NAMES
from expense_db.models import TABLE_ORDER

from .errors import ConfigurationError
from .logging_setup import configure_logging, get_logger

logger = get_logger(__name__)

app = typer.Typer(
    name="expense-tracker",
    no_args_is_help=True,
    add_completion=False,
    help="Create, migrate, seed and inspect the expense tracker database.",
)
console = Console()
err_console = Console(stderr=True)


class ReportKind(str, Enum):
    monthly = "monthly"
    daily = "daily"
    merchants = "merchants"


DatabaseUrlOption = Annotated[
    str | None,
    typer.Option("--database-url", help="Override DATABASE_URL (falls back to env var)."),
]


def _require_url(database_url: str | None) -> str:
    url = database_url or os.getenv("DATABASE_URL")
    if not url:
        raise ConfigurationError(
            "DATABASE_URL is not set. Pass --database-url or set it in the environment/.env."
        )
    return url


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {message}", highlight=False)
    return typer.Exit(1)


def _default_alembic_ini() -> Path:
    import expense_db

    # libs/db/src/expense_db/__init__.py -> libs/db/alembic.ini
    return Path(expense_db.__file__).resolve().parents[2] / "alembic.ini"


@app.command("init-db")
def init_db_cmd(database_url: DatabaseUrlOption = None) -> None:
    """Create tables, triggers, policies and views directly from the models."""

    try:
        url = _require_url(database_url)
        engine = get_engine(database_url=url)
        metadata.create_all(engine)
    except Exception as e:
        raise _fail(f"init-db failed: {e}") from e
    finally:
        dispose_engine()
    console.print(f"Schema ready ({len(TABLE_ORDER)} tables, {len(VIEW_NAMES)} views).")


@app.command("migrate")
def migrate_cmd(
    database_url: DatabaseUrlOption = None,
    revision: Annotated[str, typer.Option(help="Target Alembic revision.")] = "head",
    config: Annotated[
        Path | None, typer.Option("--config", help="Path to alembic.ini.", dir_okay=False)
    ] = None,
) -> None:
    """Upgrade the database with the Alembic migrations in ``libs/db``."""

    from alembic import command
    from alembic.config import Config

    ini = config or _default_alembic_ini()
    if not ini.exists():
        raise _fail(f"alembic.ini not found: {ini}")
    try:
        url = _require_url(database_url)
        cfg = Config(str(ini))
        cfg.attributes["database_url"] = url
        logger.info("Running migrations from %s to %s", ini, revision)
        command.upgrade(cfg, revision)
    except Exception as e:
        raise _fail(f"migration failed: {e}") from e
    console.print(f"Database upgraded to {revision}.")


@app.command("seed")
def seed_cmd(database_url: DatabaseUrlOption = None) -> None:
    """Insert default categories plus the demo user, accounts and transactions."""

    from .seed import seed_all

    try:
        report = seed_all(database_url=_require_url(database_url))
    except Exception as e:
        raise _fail(f"seeding failed: {e}") from e
    finally:
        dispose_engine()
    for name, n in report.inserted.items():
        console.print(f"{name}: {n} inserted")


@app.command("demo")
def demo_cmd(
    database_url: DatabaseUrlOption = None,
    count: Annotated[int, typer.Option(min=0, help="Number of transactions.")] = 75,
    seed: Annotated[int | None, typer.Option(help="Random seed for a repeatable batch.")] = None,
) -> None:
    """Generate random demo expenses for the demo user (run ``seed`` first)."""

    from .demo import generate_all

    try:
        inserted = generate_all(count, seed=seed, database_url=_require_url(database_url))
    except Exception as e:
        raise _fail(f"demo generation failed: {e}") from e
    finally:
        dispose_engine()
    console.print(f"transactions: {inserted} inserted")


@app.command("report")
def report_cmd(
    kind: Annotated[ReportKind, typer.Argument(help="Which analytics view to show.")],
    database_url: DatabaseUrlOption = None,
    user_id: Annotated[str | None, typer.Option(help="Only rows for this user.")] = None,
    limit: Annotated[int | None, typer.Option(min=1, help="Maximum rows to show.")] = None,
) -> None:
    """Print one of the analytics views as a table."""

    from . import analytics

    try:
        with session_scope(database_url=_require_url(database_url)) as session:
            if kind is ReportKind.monthly:
                table = Table("User", "Month", "Category", "Count", "Total", "Average")
                for m in analytics.monthly_spending(session, user_id=user_id)[:limit]:
                    table.add_row(
                        m.user_id,
                        m.month.strftime("%Y-%m"),
                        m.category,
                        str(m.transaction_count),
                        str(m.total_amount),
                        str(m.avg_amount),
                    )
            elif kind is ReportKind.daily:
                table = Table("User", "Date", "Count", "Total")
                for d in analytics.daily_spending(session, user_id=user_id)[:limit]:
                    table.add_row(
                        d.user_id,
                        d.transaction_date.isoformat(),
                        str(d.transaction_count),
                        str(d.total_amount),
                    )
            else:
                table = Table("User", "Merchant", "Count", "Total", "Average")
                for r in analytics.top_merchants(session, user_id=user_id, limit=limit):
                    table.add_row(
                        r.user_id,
                        r.merchant,
                        str(r.transaction_count),
                        str(r.total_spent),
                        str(r.avg_transaction),
                    )
    except Exception as e:
        raise _fail(f"report failed: {e}") from e
    finally:
        dispose_engine()
    table.title = f"{kind.value} spending"
    console.print(table)


@app.command("status")
def status_cmd(database_url: DatabaseUrlOption = None) -> None:
    """Show row counts per table."""

    try:
        with session_scope(database_url=_require_url(database_url)) as session:
            counts = {
                name: session.scalar(select(func.count()).select_from(metadata.tables[name]))
                for name in TABLE_ORDER
            }
    except Exception as e:
        raise _fail(f"status failed: {e}") from e
    finally:
        dispose_engine()
    table = Table("Table", "Rows", title="expense tracker")
    for name, n in counts.items():
        table.add_row(name, str(n))
    console.print(table)


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    # override=False keeps variables already set in the environment
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover - exercised via the console script
    main()
