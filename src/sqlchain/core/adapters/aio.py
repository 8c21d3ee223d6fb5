"""Async SQLite database adapter (``aiosqlite``).

Same contract as :class:`~sqlchain.core.adapters.sqlite.SQLiteAdapter`, with
every I/O method a coroutine. aiosqlite runs the stdlib driver on a
dedicated thread, so one adapter serializes its statements.
"""

from __future__ import annotations

import inspect
import sqlite3
from collections.abc import Callable
from typing import Any

import aiosqlite

from sqlchain.core.errors import ConnectionCloseError, DatabaseConnectionError
from sqlchain.core.logging import get_logger
from sqlchain.core.types import ColumnInfo, Row, WriteSummary

from .base import AdapterBase
from .types import DatabaseConfig

logger = get_logger(__name__)


class AsyncSQLiteAdapter(AdapterBase):
    """Asynchronous SQLite driver collaborator (autocommit mode)."""

    def __init__(self, config: DatabaseConfig | None = None):
        super().__init__(config or DatabaseConfig())

    async def connect(self) -> None:
        """Open the database file."""
        self._check_open()
        if self._connected:
            return

        target, uri = self._config.to_connect_target()
        try:
            self._conn = await aiosqlite.connect(
                target,
                timeout=self._config.timeout,
                uri=uri,
                isolation_level=None,
            )
            self._conn.row_factory = aiosqlite.Row
            await self._conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to open {self.path}: {e}",
                cause=e,
            ).with_context(path=self.path) from e

        self._connected = True
        logger.info("database_opened", path=self.path, mode=self.mode.value)

    async def disconnect(self) -> None:
        """Close the connection. Only the first call does anything."""
        if self._closed:
            return
        self._closed = True
        conn, self._conn = self._conn, None
        self._connected = False
        if conn is None:
            return
        try:
            await conn.close()
        except sqlite3.Error as e:
            raise ConnectionCloseError(
                f"Failed to close {self.path}: {e}",
                cause=e,
            ).with_context(path=self.path) from e
        logger.info("database_closed", path=self.path)

    async def get_connection(self) -> aiosqlite.Connection:
        if not self._connected:
            await self.connect()
        return self._conn

    async def all(self, sql: str) -> list[Row]:
        conn = await self.get_connection()
        try:
            async with conn.execute(sql) as cursor:
                rows = [dict(row) for row in await cursor.fetchall()]
        except sqlite3.Error as e:
            raise self._driver_error(e, sql) from e
        self._log_statement(sql, rows=len(rows))
        return rows

    async def run(self, sql: str) -> WriteSummary:
        conn = await self.get_connection()
        try:
            async with conn.execute(sql) as cursor:
                summary = WriteSummary(last_id=cursor.lastrowid, changes=cursor.rowcount)
        except sqlite3.Error as e:
            raise self._driver_error(e, sql) from e
        self._log_statement(sql, last_id=summary.last_id, changes=summary.changes)
        return summary

    async def each(self, sql: str, fn: Callable[[Row], Any]) -> list[Any]:
        """Apply ``fn`` (sync or async) to each row as it is fetched."""
        conn = await self.get_connection()
        results = []
        try:
            async with conn.execute(sql) as cursor:
                async for row in cursor:
                    result = fn(dict(row))
                    if inspect.isawaitable(result):
                        result = await result
                    results.append(result)
        except sqlite3.Error as e:
            raise self._driver_error(e, sql) from e
        self._log_statement(sql, rows=len(results))
        return results

    async def columns(self, table: str) -> dict[str, ColumnInfo]:
        """Column metadata of ``table`` by column name. Never cached."""
        conn = await self.get_connection()
        try:
            async with conn.execute(self._table_info_sql(table)) as cursor:
                rows = await cursor.fetchall()
        except sqlite3.Error as e:
            raise self._schema_error(table, e) from e
        return self._columns_by_name(table, rows)

    async def __aenter__(self) -> AsyncSQLiteAdapter:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()


__all__ = [
    "AsyncSQLiteAdapter",
]
