"""Relational store gateway.

Statements are plain SQL with ``:name`` placeholders. Every helper accepts either the
engine (one short transaction per statement) or a connection that already carries an
open transaction, so repositories can run the same statements inside or outside a
larger unit of work.
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from sqlalchemy import RowMapping, Table, bindparam, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeEngine

from herald.core.config import settings

logger = logging.getLogger(__name__)

# Either side of a re-entrant transaction
Executor = AsyncEngine | AsyncConnection

engine = create_async_engine(
    settings.database_url,
    pool_size=settings.max_idle_conns,
    max_overflow=max(settings.max_open_conns - settings.max_idle_conns, 0),
    pool_pre_ping=True,
    echo=False,
)


async def get_db() -> AsyncEngine:
    """Return the process-wide engine (FastAPI dependency)."""
    return engine


# ---------------------------------------------------------------------------
# Error taxonomy
# ---------------------------------------------------------------------------


class DatabaseError(Exception):
    """Base class for gateway errors."""


class NotFoundError(DatabaseError):
    """A single-row query returned nothing."""

    def __init__(self, message: str = "not found") -> None:
        super().__init__(message)


class UniqueViolationError(DatabaseError):
    """An insert or update hit a unique constraint."""

    def __init__(self, message: str = "duplicated entry") -> None:
        super().__init__(message)


class ForeignKeyViolationError(DatabaseError):
    """A referenced row does not exist."""

    def __init__(self, message: str = "referenced row does not exist") -> None:
        super().__init__(message)


class UndefinedTableError(DatabaseError):
    """A statement referenced a table that does not exist."""

    def __init__(self, message: str = "undefined table") -> None:
        super().__init__(message)


_PG_UNIQUE_VIOLATION = "23505"
_PG_FOREIGN_KEY_VIOLATION = "23503"
_PG_UNDEFINED_TABLE = "42P01"


def classify_error(err: DBAPIError) -> DatabaseError:
    """Map a driver error onto the gateway taxonomy."""
    orig = err.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == _PG_UNIQUE_VIOLATION:
        return UniqueViolationError()
    if sqlstate == _PG_FOREIGN_KEY_VIOLATION:
        return ForeignKeyViolationError()
    if sqlstate == _PG_UNDEFINED_TABLE:
        return UndefinedTableError()

    # SQLite reports extended result names instead of SQLSTATE codes
    name = getattr(orig, "sqlite_errorname", "") or ""
    message = str(orig)
    if name in ("SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY") or (
        "UNIQUE constraint failed" in message
    ):
        return UniqueViolationError()
    if name == "SQLITE_CONSTRAINT_FOREIGNKEY" or "FOREIGN KEY constraint failed" in message:
        return ForeignKeyViolationError()
    if "no such table" in message:
        return UndefinedTableError()

    return DatabaseError(message)


# ---------------------------------------------------------------------------
# Statement helpers
# ---------------------------------------------------------------------------

_PLACEHOLDER = re.compile(r"(?<![:\w\\]):(\w+)(?!:)")


def column_types(*tables: Table) -> dict[str, TypeEngine[Any]]:
    """Collect column types by name; earlier tables win on clashes."""
    types: dict[str, TypeEngine[Any]] = {}
    for table in tables:
        for column in table.columns:
            types.setdefault(column.name, column.type)
    return types


def _statement(query: str, types: Mapping[str, TypeEngine[Any]] | None) -> TextClause:
    stmt = text(query)
    if not types:
        return stmt
    names = dict.fromkeys(_PLACEHOLDER.findall(query))
    binds = [bindparam(name, type_=types[name]) for name in names if name in types]
    return stmt.bindparams(*binds) if binds else stmt


async def _execute(
    db: Executor,
    query: str,
    params: Mapping[str, Any],
    *,
    types: Mapping[str, TypeEngine[Any]] | None,
    result_table: Table | None,
) -> tuple[int, Sequence[RowMapping]]:
    stmt: Any = _statement(query, types)
    if result_table is not None:
        stmt = stmt.columns(**{column.name: column.type for column in result_table.columns})

    async def run(conn: AsyncConnection) -> tuple[int, Sequence[RowMapping]]:
        result = await conn.execute(stmt, dict(params))
        rows = result.mappings().all() if result.returns_rows else []
        return result.rowcount, rows

    try:
        if isinstance(db, AsyncEngine):
            async with db.begin() as conn:
                return await run(conn)
        return await run(db)
    except DBAPIError as err:
        classified = classify_error(err)
        logger.error(
            "database statement failed",
            extra={"query": " ".join(query.split()), "error": str(classified)},
        )
        raise classified from err


async def named_exec(
    db: Executor,
    query: str,
    params: Mapping[str, Any],
    *,
    types: Mapping[str, TypeEngine[Any]] | None = None,
) -> int:
    """Execute a statement and return the number of affected rows."""
    rowcount, _ = await _execute(db, query, params, types=types, result_table=None)
    return rowcount


async def named_query_one(
    db: Executor,
    query: str,
    params: Mapping[str, Any],
    table: Table,
    *,
    types: Mapping[str, TypeEngine[Any]] | None = None,
) -> RowMapping:
    """Run a query expected to return a single row of ``table``.

    Raises NotFoundError when the result is empty.
    """
    _, rows = await _execute(db, query, params, types=types, result_table=table)
    if not rows:
        raise NotFoundError()
    return rows[0]


async def named_query_many(
    db: Executor,
    query: str,
    params: Mapping[str, Any],
    table: Table,
    *,
    types: Mapping[str, TypeEngine[Any]] | None = None,
) -> Sequence[RowMapping]:
    """Run a query returning any number of rows of ``table``."""
    _, rows = await _execute(db, query, params, types=types, result_table=table)
    return rows


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


async def within_transaction[T](
    db: AsyncEngine,
    fn: Callable[[AsyncConnection], Awaitable[T]],
) -> T:
    """Run ``fn`` inside one transaction.

    Commits when ``fn`` returns and rolls back when it raises. Driver errors escaping
    ``fn`` or the commit are re-raised as gateway errors.
    """
    async with db.connect() as conn:
        tran = await conn.begin()
        logger.debug("begin tran")
        try:
            result = await fn(conn)
            await tran.commit()
        except BaseException as exc:
            # Commit may have finished the transaction already
            if tran.is_active:
                await tran.rollback()
            logger.info("rollback tran", extra={"error": str(exc)})
            if isinstance(exc, DBAPIError):
                raise classify_error(exc) from exc
            raise
        logger.debug("commit tran")
        return result


async def ping(db: AsyncEngine, *, timeout: float = 10.0) -> None:
    """Wait until the database answers a trivial query, or raise after ``timeout`` seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    attempt = 1
    while True:
        try:
            async with db.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return
        except (DBAPIError, OSError) as err:
            if loop.time() >= deadline:
                msg = f"database not reachable after {attempt} attempts"
                raise DatabaseError(msg) from err
            logger.info("database not ready, retrying", extra={"attempt": attempt})
            await asyncio.sleep(min(0.1 * attempt, 1.0))
            attempt += 1
