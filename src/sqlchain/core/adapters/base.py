"""Database adapter base class.

Manifesto:
    The sync and async adapters share their lifecycle state, their mapping
    of driver exceptions onto the sqlchain taxonomy, and how they log. Only
    the I/O calls differ, so those live in the subclasses.

Features:
    - Connection-state flags enforcing a single close
    - Driver error translation (``QueryError`` / ``IntegrityError`` / ``SchemaError``)
    - Statement logging at DEBUG

Tags:
    sqlchain, database, adapter-pattern

Doc-Types:
    api-reference
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from typing import Any

from sqlchain.core.errors import (
    DatabaseError,
    IntegrityError,
    QueryError,
    SchemaError,
    SqlChainError,
)
from sqlchain.core.logging import get_logger
from sqlchain.core.types import ColumnInfo, OpenMode

from .types import DatabaseConfig

logger = get_logger(__name__)


class AdapterBase:
    """Shared state and helpers for :class:`SQLiteAdapter` and :class:`AsyncSQLiteAdapter`."""

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._conn: Any = None
        self._connected = False
        self._closed = False

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def path(self) -> str:
        return self._config.path or ":memory:"

    @property
    def mode(self) -> OpenMode:
        return self._config.mode

    @property
    def is_connected(self) -> bool:
        """Whether the adapter holds an open connection."""
        return self._connected

    @property
    def is_closed(self) -> bool:
        """Whether the connection has been closed (it cannot be reopened)."""
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise DatabaseError("Connection is closed").with_context(path=self.path)

    def _log_statement(self, sql: str, **fields: Any) -> None:
        logger.debug("statement_executed", path=self.path, sql=sql, **fields)

    @staticmethod
    def _driver_error(error: sqlite3.Error, sql: str) -> SqlChainError:
        """Map a driver exception to a sqlchain error carrying the statement."""
        if isinstance(error, sqlite3.IntegrityError):
            return IntegrityError(f"Constraint violation: {error}", cause=error).with_context(statement=sql)
        return QueryError(f"Statement failed: {error}", cause=error).with_context(statement=sql)

    @staticmethod
    def _table_info_sql(table: str) -> str:
        return f"PRAGMA table_info({table})"

    @staticmethod
    def _columns_by_name(table: str, rows: Iterable[Any]) -> dict[str, ColumnInfo]:
        columns = {info.name: info for info in map(ColumnInfo.from_row, rows)}
        if not columns:
            raise SchemaError(f"No such table: {table}").with_context(table=table)
        return columns

    @staticmethod
    def _schema_error(table: str, error: sqlite3.Error) -> SchemaError:
        return SchemaError(f"Could not read columns of {table}: {error}", cause=error).with_context(table=table)


__all__ = [
    "AdapterBase",
]
