"""
Database engine, session factory and raw SQL execution.

Queries are written by hand with PostgreSQL-style positional placeholders
($1, $2, ...) and run through `run_sql`, which rewrites them into SQLAlchemy
bind parameters. The same statements run on SQLite (used by the tests) with
the small dialect adjustments applied in `compile_positional`.
"""
import logging
import re
from decimal import Decimal
from typing import Any, AsyncGenerator, Optional, Sequence

from sqlalchemy import event, text
from sqlalchemy.engine import CursorResult, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from jobly.config import settings

logger = logging.getLogger(__name__)

_POSITIONAL_PARAM_RE = re.compile(r"\$(\d+)")
_ILIKE_RE = re.compile(r"\bILIKE\b", re.IGNORECASE)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores REFERENCES/ON DELETE CASCADE unless asked per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite connections get foreign key enforcement switched on so that
    referential-integrity failures and cascading deletes behave the same
    way they do on PostgreSQL.
    """
    new_engine = create_async_engine(database_url, **kwargs)
    if new_engine.dialect.name == "sqlite":
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def mask_database_url(database_url: str) -> str:
    """Render a database URL with the password hidden, for logging."""
    try:
        return make_url(database_url).render_as_string(hide_password=True)
    except Exception:
        return "configured"


engine = build_engine(settings.database_url, pool_pre_ping=True)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with AsyncSessionLocal() as session:
        yield session


def _bind_value(value: Any, dialect_name: str) -> Any:
    if dialect_name != "postgresql" and isinstance(value, Decimal):
        # sqlite3 cannot bind Decimal
        return float(value)
    return value


def compile_positional(
    sql: str,
    values: Optional[Sequence[Any]],
    dialect_name: str = "postgresql"
) -> tuple[str, dict[str, Any]]:
    """
    Rewrite `$n` placeholders into `:pn` bind parameters.

    Returns the rewritten SQL and a parameter dict keyed by bind name.
    `$n` refers to values[n - 1]; a placeholder past the end of `values`
    raises ValueError.

    Example:
        compile_positional("SELECT * FROM jobs WHERE id = $1", [7])
        -> ("SELECT * FROM jobs WHERE id = :p1", {"p1": 7})
    """
    values = list(values or [])
    params: dict[str, Any] = {}

    def repl(match: re.Match) -> str:
        position = int(match.group(1))
        if position < 1 or position > len(values):
            raise ValueError(f"No value for SQL parameter ${position}")
        name = f"p{position}"
        params[name] = _bind_value(values[position - 1], dialect_name)
        return f":{name}"

    compiled_sql = _POSITIONAL_PARAM_RE.sub(repl, sql)

    if dialect_name != "postgresql":
        # SQLite LIKE is already case-insensitive for ASCII
        compiled_sql = _ILIKE_RE.sub("LIKE", compiled_sql)

    return compiled_sql, params


async def run_sql(
    db: AsyncSession,
    sql: str,
    values: Optional[Sequence[Any]] = None
) -> CursorResult:
    """
    Execute a statement written with positional `$n` placeholders.

    The caller owns the transaction: writes must be followed by
    `await db.commit()`.
    """
    compiled_sql, params = compile_positional(sql, values, db.bind.dialect.name)
    return await db.execute(text(compiled_sql), params)
