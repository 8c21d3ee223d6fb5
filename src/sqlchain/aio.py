"""
Async variant of the operation set, over ``aiosqlite``.

``AsyncDatabase`` mirrors :class:`~sqlchain.database.Database` method for
method. Operations are awaited one at a time; the only concurrency is inside
``create_many``, which looks up metadata and sanitizes every row in parallel
before issuing one combined INSERT.

Examples:
    >>> async with await AsyncDatabase.open("chinook.db") as db:
    ...     await db.create_many("artists", ["Name"], [["Tool"], ["Helmet"]])
    ...     rows = await db.read("artists", ["Name"], "ArtistId > 275")
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any

from sqlchain.core import statements
from sqlchain.core.adapters import AsyncSQLiteAdapter
from sqlchain.core.settings import SqlChainSettings
from sqlchain.core.types import ColumnInfo, OpenMode, Row, WriteSummary
from sqlchain.database import DatabaseBase


class AsyncDatabase(DatabaseBase):
    """Asynchronous operation set bound to one SQLite connection."""

    @classmethod
    async def open(
        cls,
        path: str | None = None,
        mode: OpenMode | str | None = None,
        *,
        settings: SqlChainSettings | None = None,
    ) -> AsyncDatabase:
        config, settings = cls._resolve(path, mode, settings)
        adapter = AsyncSQLiteAdapter(config)
        await adapter.connect()
        return cls(adapter, quoting=settings.text_quoting, strict=settings.strict_numbers)

    async def columns(self, table: str) -> dict[str, ColumnInfo]:
        return await self._adapter.columns(table)

    async def sanitize_values(
        self, table: str, column_names: Sequence[str], values: Sequence[Any]
    ) -> list[Any]:
        return self._sanitize(table, await self.columns(table), column_names, values)

    async def create(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> WriteSummary:
        fragments = await self.sanitize_values(table, columns, values)
        return await self._adapter.run(statements.insert(table, columns, fragments))

    async def create_many(
        self, table: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]
    ) -> WriteSummary:
        sanitized = await asyncio.gather(
            *(self.sanitize_values(table, columns, row) for row in rows)
        )
        return await self._adapter.run(statements.insert_many(table, columns, list(sanitized)))

    async def read(self, table: str, columns: Sequence[str], criteria: str) -> list[Row]:
        return await self._adapter.all(statements.select(table, columns, criteria))

    async def get_row(self, table: str, column: str, value: Any) -> list[Row]:
        (fragment,) = await self.sanitize_values(table, [column], [value])
        return await self._adapter.all(statements.select_by_key(table, column, fragment))

    async def get_rows(self, table: str, columns: Sequence[str]) -> list[Row]:
        return await self._adapter.all(statements.select_all(table, columns))

    async def exists(self, table: str, column: str, value: Any) -> bool:
        return len(await self.get_row(table, column, value)) == 1

    async def update(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        criteria: str,
    ) -> WriteSummary:
        fragments = await self.sanitize_values(table, columns, values)
        return await self._adapter.run(statements.update(table, columns, fragments, criteria))

    async def update_row(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        criteria_column: str,
        criteria_value: Any,
    ) -> WriteSummary:
        fragments = await self.sanitize_values(table, columns, values)
        (key,) = await self.sanitize_values(table, [criteria_column], [criteria_value])
        criteria = statements.equals(criteria_column, key)
        return await self._adapter.run(statements.update(table, columns, fragments, criteria))

    async def delete(self, table: str, criteria: str) -> WriteSummary:
        return await self._adapter.run(statements.delete(table, criteria))

    async def delete_row(self, table: str, column: str, value: Any) -> WriteSummary:
        (fragment,) = await self.sanitize_values(table, [column], [value])
        return await self.delete(table, statements.equals(column, fragment))

    async def delete_rows(self, table: str) -> WriteSummary:
        return await self._adapter.run(statements.delete_all(table))

    async def query(self, sql: str) -> WriteSummary:
        return await self._adapter.run(sql)

    async def query_rows(self, sql: str) -> list[Row]:
        return await self._adapter.all(sql)

    async def map(self, sql: str, fn: Callable[[Row], Any]) -> list[Any]:
        """Apply ``fn`` (sync or async) to each row of ``sql``."""
        return await self._adapter.each(sql, fn)

    async def close(self) -> None:
        await self._adapter.disconnect()

    async def __aenter__(self) -> AsyncDatabase:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


__all__ = [
    "AsyncDatabase",
]
