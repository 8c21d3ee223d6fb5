"""SQLite database adapter (stdlib ``sqlite3``)."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from typing import Any

from sqlchain.core.errors import ConnectionCloseError, DatabaseConnectionError
from sqlchain.core.logging import get_logger
from sqlchain.core.types import ColumnInfo, Row, WriteSummary

from .base import AdapterBase
from .types import DatabaseConfig

logger = get_logger(__name__)


class SQLiteAdapter(AdapterBase):
    """
    Synchronous SQLite driver collaborator.

    The connection runs in autocommit mode: each statement is durable as soon
    as it completes, there are no implicit transactions.
    """

    def __init__(self, config: DatabaseConfig | None = None):
        super().__init__(config or DatabaseConfig())

    def connect(self) -> None:
        """Open the database file."""
        self._check_open()
        if self._connected:
            return

        target, uri = self._config.to_connect_target()
        try:
            self._conn = sqlite3.connect(
                target,
                timeout=self._config.timeout,
                uri=uri,
                isolation_level=None,
                check_same_thread=False,
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to open {self.path}: {e}",
                cause=e,
            ).with_context(path=self.path) from e

        self._connected = True
        logger.info("database_opened", path=self.path, mode=self.mode.value)

    def disconnect(self) -> None:
        """Close the connection. Only the first call does anything."""
        if self._closed:
            return
        self._closed = True
        conn, self._conn = self._conn, None
        self._connected = False
        if conn is None:
            return
        try:
            conn.close()
        except sqlite3.Error as e:
            raise ConnectionCloseError(
                f"Failed to close {self.path}: {e}",
                cause=e,
            ).with_context(path=self.path) from e
        logger.info("database_closed", path=self.path)

    def get_connection(self) -> sqlite3.Connection:
        """Get the connection, opening it on first use."""
        if not self._connected:
            self.connect()
        return self._conn

    def all(self, sql: str) -> list[Row]:
        """Execute ``sql`` and return every row as a dict."""
        conn = self.get_connection()
        try:
            rows = [dict(row) for row in conn.execute(sql).fetchall()]
        except sqlite3.Error as e:
            raise self._driver_error(e, sql) from e
        self._log_statement(sql, rows=len(rows))
        return rows

    def run(self, sql: str) -> WriteSummary:
        """Execute ``sql`` for its side effect."""
        conn = self.get_connection()
        try:
            cursor = conn.execute(sql)
        except sqlite3.Error as e:
            raise self._driver_error(e, sql) from e
        summary = WriteSummary(last_id=cursor.lastrowid, changes=cursor.rowcount)
        cursor.close()
        self._log_statement(sql, last_id=summary.last_id, changes=summary.changes)
        return summary

    def each(self, sql: str, fn: Callable[[Row], Any]) -> list[Any]:
        """Apply ``fn`` to each row as it is fetched; return the results in order."""
        conn = self.get_connection()
        results = []
        try:
            for row in conn.execute(sql):
                results.append(fn(dict(row)))
        except sqlite3.Error as e:
            raise self._driver_error(e, sql) from e
        self._log_statement(sql, rows=len(results))
        return results

    def columns(self, table: str) -> dict[str, ColumnInfo]:
        """Column metadata of ``table`` by column name. Never cached."""
        conn = self.get_connection()
        try:
            rows = conn.execute(self._table_info_sql(table)).fetchall()
        except sqlite3.Error as e:
            raise self._schema_error(table, e) from e
        return self._columns_by_name(table, rows)

    def __enter__(self) -> SQLiteAdapter:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()


__all__ = [
    "SQLiteAdapter",
]
