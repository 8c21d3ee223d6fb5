"""SQL statement assembly from already-sanitized fragments.

Every function here returns a complete statement string. Nothing is parsed or
validated beyond the shape of the inputs: table names, column names and
criteria expressions are interpolated verbatim. An empty criteria raises
:class:`StatementError`; whole-table reads and deletes have their own builders.

Examples:
    >>> insert("artists", ["Name"], ['"Nine Inch Nails"'])
    'INSERT INTO artists (Name) VALUES ("Nine Inch Nails")'
    >>> select("artists", ["ArtistId", "Name"], "ArtistId > 100")
    'SELECT ArtistId, Name FROM artists WHERE ArtistId > 100'
    >>> delete("artists", equals("ArtistId", "7"))
    'DELETE FROM artists WHERE ArtistId = 7'
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlchain.core.errors import StatementError


def fragment(value: Any) -> str:
    """Text of one sanitized fragment. ``None`` renders as SQL ``NULL``."""
    if value is None:
        return "NULL"
    return str(value)


def _column_list(columns: Sequence[str]) -> str:
    return ", ".join(columns)


def _value_list(fragments: Sequence[Any]) -> str:
    return ", ".join(fragment(v) for v in fragments)


def _check_lengths(table: str, columns: Sequence[str], fragments: Sequence[Any]) -> None:
    if len(columns) != len(fragments):
        raise StatementError(
            f"Got {len(fragments)} values for {len(columns)} columns"
        ).with_context(table=table)


def _where(table: str, criteria: str | None) -> str:
    if criteria is None or not criteria.strip():
        raise StatementError("Empty criteria; use the whole-table form instead").with_context(
            table=table
        )
    return f" WHERE {criteria}"


def equals(column: str, value: Any) -> str:
    """``column = value`` criteria for the by-key operations."""
    return f"{column} = {fragment(value)}"


def insert(table: str, columns: Sequence[str], fragments: Sequence[Any]) -> str:
    _check_lengths(table, columns, fragments)
    return f"INSERT INTO {table} ({_column_list(columns)}) VALUES ({_value_list(fragments)})"


def insert_many(table: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> str:
    """One INSERT with a multi-row VALUES clause."""
    if not rows:
        raise StatementError("No rows to insert").with_context(table=table)
    for row in rows:
        _check_lengths(table, columns, row)
    values = ", ".join(f"({_value_list(row)})" for row in rows)
    return f"INSERT INTO {table} ({_column_list(columns)}) VALUES {values}"


def select(table: str, columns: Sequence[str], criteria: str) -> str:
    return f"SELECT {_column_list(columns)} FROM {table}{_where(table, criteria)}"


def select_all(table: str, columns: Sequence[str]) -> str:
    return f"SELECT {_column_list(columns)} FROM {table}"


def select_by_key(table: str, column: str, value: Any) -> str:
    return f"SELECT * FROM {table} WHERE {equals(column, value)} LIMIT 1"


def update(
    table: str,
    columns: Sequence[str],
    fragments: Sequence[Any],
    criteria: str,
) -> str:
    _check_lengths(table, columns, fragments)
    assignments = ", ".join(equals(c, v) for c, v in zip(columns, fragments))
    return f"UPDATE {table} SET {assignments}{_where(table, criteria)}"


def delete(table: str, criteria: str) -> str:
    return f"DELETE FROM {table}{_where(table, criteria)}"


def delete_all(table: str) -> str:
    return f"DELETE FROM {table}"


__all__ = [
    "fragment",
    "equals",
    "insert",
    "insert_many",
    "select",
    "select_all",
    "select_by_key",
    "update",
    "delete",
    "delete_all",
]
