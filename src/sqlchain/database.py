"""
Chained-CRUD operation set over a synchronous SQLite connection.

``Database`` is the caller-facing surface: every operation sanitizes its
values against live column metadata, assembles one literal statement and
hands it to the adapter. Reads return lists of row dicts, writes return a
:class:`~sqlchain.core.types.WriteSummary`; that return value is the
operation's *cursor*.

Manifesto:
    The connection is the only shared resource. It is opened once, held for
    any number of operations, and closed exactly once, either explicitly or
    when the ``with`` block that owns it exits, including on error.

Architecture:
    ::

        Database.create(table, columns, values)
            │
            ├── adapter.columns(table)          PRAGMA table_info round trip
            ├── sanitize_values(...)            fragments per type class
            ├── statements.insert(...)          literal SQL text
            └── adapter.run(sql)                WriteSummary

Examples:
    >>> with Database.open("chinook.db") as db:
    ...     summary = db.create("artists", ["Name"], ["Rage Against The Machine"])
    ...     db.get_row("artists", "ArtistId", summary.last_id)
    [{'ArtistId': 276, 'Name': 'Rage Against The Machine'}]

Guardrails:
    ❌ DON'T: Pass user input as a criteria expression; it is used verbatim
    ✅ DO: Use the by-key operations, which sanitize the key value

Tags:
    crud, sqlite, sanitize, sqlchain

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from sqlchain.core import statements
from sqlchain.core.adapters import DatabaseConfig, SQLiteAdapter
from sqlchain.core.sanitize import Quoting, sanitize_values
from sqlchain.core.settings import SqlChainSettings, get_settings
from sqlchain.core.types import ColumnInfo, OpenMode, Row, WriteSummary


class DatabaseBase:
    """Configuration shared by :class:`Database` and ``AsyncDatabase``."""

    def __init__(
        self,
        adapter: Any,
        *,
        quoting: Quoting = "double",
        strict: bool = False,
    ):
        self._adapter = adapter
        self._quoting = quoting
        self._strict = strict

    @staticmethod
    def _resolve(
        path: str | None,
        mode: OpenMode | str | None,
        settings: SqlChainSettings | None,
    ) -> tuple[DatabaseConfig, SqlChainSettings]:
        settings = settings or get_settings()
        config = DatabaseConfig(
            path=path if path is not None else settings.database_path,
            mode=OpenMode(mode) if mode is not None else settings.open_mode,
            timeout=settings.timeout,
        )
        return config, settings

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def path(self) -> str:
        return self._adapter.path

    @property
    def is_closed(self) -> bool:
        return self._adapter.is_closed

    def _sanitize(
        self,
        table: str,
        columns_by_name: dict[str, ColumnInfo],
        column_names: Sequence[str],
        values: Sequence[Any],
    ) -> list[Any]:
        return sanitize_values(
            columns_by_name,
            column_names,
            values,
            table=table,
            quoting=self._quoting,
            strict=self._strict,
        )

    def __repr__(self) -> str:
        state = "closed" if self.is_closed else "open"
        return f"{self.__class__.__name__}({self.path!r}, {state})"


class Database(DatabaseBase):
    """Synchronous operation set bound to one SQLite connection."""

    @classmethod
    def open(
        cls,
        path: str | None = None,
        mode: OpenMode | str | None = None,
        *,
        settings: SqlChainSettings | None = None,
    ) -> Database:
        """
        Open ``path`` (default: ``settings.database_path``) in ``mode``.

        The connection stays open until :meth:`close` or the end of a
        ``with`` block.
        """
        config, settings = cls._resolve(path, mode, settings)
        adapter = SQLiteAdapter(config)
        adapter.connect()
        return cls(adapter, quoting=settings.text_quoting, strict=settings.strict_numbers)

    # -- Metadata ----------------------------------------------------------

    def columns(self, table: str) -> dict[str, ColumnInfo]:
        return self._adapter.columns(table)

    def sanitize_values(
        self, table: str, column_names: Sequence[str], values: Sequence[Any]
    ) -> list[Any]:
        """Sanitize ``values`` against the live column types of ``table``."""
        return self._sanitize(table, self.columns(table), column_names, values)

    # -- Create ------------------------------------------------------------

    def create(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> WriteSummary:
        fragments = self.sanitize_values(table, columns, values)
        return self._adapter.run(statements.insert(table, columns, fragments))

    def create_many(
        self, table: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]
    ) -> WriteSummary:
        """Insert ``rows`` with a single multi-row INSERT."""
        sanitized = [self.sanitize_values(table, columns, row) for row in rows]
        return self._adapter.run(statements.insert_many(table, columns, sanitized))

    # -- Read --------------------------------------------------------------

    def read(self, table: str, columns: Sequence[str], criteria: str) -> list[Row]:
        return self._adapter.all(statements.select(table, columns, criteria))

    def get_row(self, table: str, column: str, value: Any) -> list[Row]:
        """At most one row where ``column`` equals ``value``."""
        (fragment,) = self.sanitize_values(table, [column], [value])
        return self._adapter.all(statements.select_by_key(table, column, fragment))

    def get_rows(self, table: str, columns: Sequence[str]) -> list[Row]:
        return self._adapter.all(statements.select_all(table, columns))

    def exists(self, table: str, column: str, value: Any) -> bool:
        return len(self.get_row(table, column, value)) == 1

    # -- Update ------------------------------------------------------------

    def update(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        criteria: str,
    ) -> WriteSummary:
        fragments = self.sanitize_values(table, columns, values)
        return self._adapter.run(statements.update(table, columns, fragments, criteria))

    def update_row(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        criteria_column: str,
        criteria_value: Any,
    ) -> WriteSummary:
        fragments = self.sanitize_values(table, columns, values)
        (key,) = self.sanitize_values(table, [criteria_column], [criteria_value])
        criteria = statements.equals(criteria_column, key)
        return self._adapter.run(statements.update(table, columns, fragments, criteria))

    # -- Delete ------------------------------------------------------------

    def delete(self, table: str, criteria: str) -> WriteSummary:
        return self._adapter.run(statements.delete(table, criteria))

    def delete_row(self, table: str, column: str, value: Any) -> WriteSummary:
        (fragment,) = self.sanitize_values(table, [column], [value])
        return self.delete(table, statements.equals(column, fragment))

    def delete_rows(self, table: str) -> WriteSummary:
        return self._adapter.run(statements.delete_all(table))

    # -- Raw ---------------------------------------------------------------

    def query(self, sql: str) -> WriteSummary:
        """Run a fully formed statement for its side effect."""
        return self._adapter.run(sql)

    def query_rows(self, sql: str) -> list[Row]:
        """Run a fully formed statement and return all rows."""
        return self._adapter.all(sql)

    def map(self, sql: str, fn: Callable[[Row], Any]) -> list[Any]:
        """Apply ``fn`` to each row of ``sql`` without loading all rows first."""
        return self._adapter.each(sql, fn)

    # -- Lifecycle ---------------------------------------------------------

    def close(self) -> None:
        self._adapter.disconnect()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "DatabaseBase",
    "Database",
]
