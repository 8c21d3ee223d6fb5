"""Database adapters: the SQLite driver collaborators.

Architecture::

    AdapterBase (base.py)            Lifecycle flags, error translation, logging
        |-- SQLiteAdapter            stdlib sqlite3 (sync)
        |-- AsyncSQLiteAdapter       aiosqlite (async)

    DatabaseConfig (types.py)        Path, open mode, busy timeout

Each adapter exposes the three execution primitives the operation layer is
built on (``all``, ``run``, ``each``) plus ``columns`` for schema
introspection.

Guardrails:
    ❌ Reopening an adapter after ``disconnect()``
    ✅ Open a new ``Database`` instead; a connection closes exactly once
"""

from .aio import AsyncSQLiteAdapter
from .base import AdapterBase
from .sqlite import SQLiteAdapter
from .types import MEMORY_PATH, DatabaseConfig

__all__ = [
    "DatabaseConfig",
    "MEMORY_PATH",
    "AdapterBase",
    "SQLiteAdapter",
    "AsyncSQLiteAdapter",
]
