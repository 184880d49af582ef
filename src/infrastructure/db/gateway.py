"""Persistence gateway over a pooled async SQLAlchemy engine.

The :class:`Database` object owns the connection pool. It is created once per
process, opened with :meth:`Database.connect` and drained with
:meth:`Database.dispose`; callers receive it by injection instead of reaching
for a module global.
"""

from __future__ import annotations

import enum
from collections.abc import AsyncIterator, Iterator, Mapping
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.sql import Executable
from src.core.config import Settings
from src.domain.errors import PersistenceError

from .errors import classify_error

logger = structlog.get_logger()

Statement = Executable | str
Params = Mapping[str, Any] | None


@dataclass(frozen=True, slots=True)
class ExecuteResult:
    """Outcome of a write statement."""

    insert_id: int | None
    affected_rows: int


@contextmanager
def _translated(operation: str) -> Iterator[None]:
    try:
        yield
    except (SQLAlchemyError, OSError, TimeoutError) as exc:
        error = (
            classify_error(exc) if isinstance(exc, SQLAlchemyError) else PersistenceError()
        )
        logger.warning(
            "database_error",
            operation=operation,
            error_type=type(exc).__name__,
            classified_as=type(error).__name__,
        )
        raise error from exc


def _as_statement(stmt: Statement) -> Executable:
    return text(stmt) if isinstance(stmt, str) else stmt


def _plain_row(row: Mapping[str, Any]) -> dict[str, Any]:
    # Enum columns come back as members; callers get the stored values
    return {
        key: value.value if isinstance(value, enum.Enum) else value for key, value in row.items()
    }


def _insert_id(result: CursorResult) -> int | None:
    if result.is_insert:
        primary_key = result.inserted_primary_key
        return primary_key[0] if primary_key else None
    return None


async def _query(conn: AsyncConnection, stmt: Statement, params: Params) -> list[dict[str, Any]]:
    with _translated("query"):
        result = await conn.execute(_as_statement(stmt), dict(params) if params else None)
        return [_plain_row(row) for row in result.mappings().all()]


async def _execute(conn: AsyncConnection, stmt: Statement, params: Params) -> ExecuteResult:
    with _translated("execute"):
        result = await conn.execute(_as_statement(stmt), dict(params) if params else None)
        return ExecuteResult(insert_id=_insert_id(result), affected_rows=result.rowcount)


class Transaction:
    """A dedicated pooled connection inside an open transaction."""

    def __init__(self, connection: AsyncConnection) -> None:
        self._connection = connection

    async def query(self, stmt: Statement, params: Params = None) -> list[dict[str, Any]]:
        return await _query(self._connection, stmt, params)

    async def query_one(self, stmt: Statement, params: Params = None) -> dict[str, Any] | None:
        rows = await self.query(stmt, params)
        return rows[0] if rows else None

    async def execute(self, stmt: Statement, params: Params = None) -> ExecuteResult:
        return await _execute(self._connection, stmt, params)


class Database:
    """Connection pool with parameterized query/execute and transactions."""

    def __init__(self, url: str, **engine_options: Any) -> None:
        self.url = url
        self._engine_options = engine_options
        self._engine: AsyncEngine | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise PersistenceError("Database is not connected")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> None:
        """Open the connection pool. Calling it twice is a no-op."""
        if self._engine is not None:
            return
        self._engine = create_async_engine(self.url, future=True, **self._engine_options)
        logger.info("database_pool_opened", dialect=self._engine.dialect.name)

    async def dispose(self) -> None:
        """Drain and close every pooled connection."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        logger.info("database_pool_closed")

    async def query(self, stmt: Statement, params: Params = None) -> list[dict[str, Any]]:
        """Run a read statement on a pooled connection and return rows as dicts."""
        async with self._connection() as conn:
            return await _query(conn, stmt, params)

    async def query_one(self, stmt: Statement, params: Params = None) -> dict[str, Any] | None:
        rows = await self.query(stmt, params)
        return rows[0] if rows else None

    async def execute(self, stmt: Statement, params: Params = None) -> ExecuteResult:
        """Run a single write statement in its own transaction."""
        async with self.transaction() as tx:
            return await tx.execute(stmt, params)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        """Acquire a dedicated connection and run the block in one transaction.

        Commits on clean exit. On any exception the transaction is rolled back
        before the exception leaves this context. The connection always goes
        back to the pool.
        """
        async with self._connection() as conn:
            with _translated("begin"):
                trans = await conn.begin()
            try:
                yield Transaction(conn)
            except BaseException:
                try:
                    await trans.rollback()
                except SQLAlchemyError:
                    logger.exception("transaction_rollback_failed")
                logger.debug("transaction_rolled_back")
                raise
            with _translated("commit"):
                await trans.commit()

    async def ping(self) -> bool:
        """Return True when a pooled connection answers ``SELECT 1``."""
        try:
            await self.query("SELECT 1")
        except PersistenceError:
            return False
        return True

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[AsyncConnection]:
        conn = self.engine.connect()
        with _translated("connect"):
            await conn.start()
        try:
            yield conn
        finally:
            await conn.close()


def build_database(settings: Settings) -> Database:
    """Create the process-wide gateway from settings (not yet connected)."""
    url = settings.async_database_url
    options: dict[str, Any] = {"pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
        )
    return Database(url, **options)
