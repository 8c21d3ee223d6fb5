"""Column metadata, type classes and operation result types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class TypeClass(str, Enum):
    """
    Type class of a column, derived from its declared SQL type.

    Mirrors SQLite's column affinity rules (https://sqlite.org/datatype3.html),
    not any SQL standard.
    """

    INTEGER = "INTEGER"
    TEXT = "TEXT"
    BLOB = "BLOB"
    REAL = "REAL"
    NUMERIC = "NUMERIC"


class OpenMode(str, Enum):
    """How a database file is opened. Values are SQLite URI ``mode=`` values."""

    READONLY = "ro"
    READWRITE = "rw"
    READWRITE_CREATE = "rwc"
    MEMORY = "memory"


@dataclass(frozen=True)
class ColumnInfo:
    """One row of ``PRAGMA table_info``."""

    cid: int
    name: str
    declared_type: str
    notnull: bool = False
    default: Any = None
    pk: int = 0

    @property
    def type_class(self) -> TypeClass:
        from sqlchain.core.sanitize import classify_type

        return classify_type(self.declared_type)

    @classmethod
    def from_row(cls, row: Any) -> ColumnInfo:
        """Build from a ``sqlite3.Row`` (or mapping) returned by the pragma."""
        return cls(
            cid=row["cid"],
            name=row["name"],
            declared_type=row["type"] or "",
            notnull=bool(row["notnull"]),
            default=row["dflt_value"],
            pk=row["pk"],
        )


@dataclass(frozen=True)
class WriteSummary:
    """
    Cursor of a write operation.

    ``last_id`` is the rowid of the last inserted row (``None`` when the
    statement inserted nothing on this connection); ``changes`` is the number
    of rows the statement modified.
    """

    last_id: int | None
    changes: int


Row = dict[str, Any]
Cursor = list[Row] | WriteSummary | bool | list[Any]


__all__ = [
    "TypeClass",
    "OpenMode",
    "ColumnInfo",
    "WriteSummary",
    "Row",
    "Cursor",
]
