"""sqlchain core -- sanitizing, statement assembly and the SQLite adapters.

Manifesto:
    Everything the operation layer needs, without the operations themselves.
    Values are turned into literal fragments against live column metadata,
    fragments are assembled into statements, and statements are executed by
    an adapter that owns the one connection.

Architecture::

    Layer 1 -- Types & Errors
        types.py           TypeClass, OpenMode, ColumnInfo, WriteSummary
        errors.py          Structured error hierarchy (SqlChainError)
        result.py          Ok / Err envelope for chain outcomes

    Layer 2 -- Values & Statements
        sanitize.py        Type classification and value coercion
        statements.py      INSERT / SELECT / UPDATE / DELETE text

    Layer 3 -- Execution
        adapters/          sqlite3 and aiosqlite adapters

    Ambient
        logging.py         structlog configuration
        settings.py        pydantic-settings (SQLCHAIN_* env vars)
"""

from sqlchain.core.errors import (
    ConfigError,
    ConnectionCloseError,
    DatabaseConnectionError,
    DatabaseError,
    IntegrityError,
    MissingColumnError,
    QueryError,
    SanitizeError,
    SchemaError,
    SqlChainError,
    StatementError,
    ValidationError,
)
from sqlchain.core.result import Err, Ok, Result, try_result
from sqlchain.core.sanitize import classify_type, sanitize, sanitize_values
from sqlchain.core.types import ColumnInfo, OpenMode, TypeClass, WriteSummary

__all__ = [
    # Types
    "TypeClass",
    "OpenMode",
    "ColumnInfo",
    "WriteSummary",
    # Result
    "Result",
    "Ok",
    "Err",
    "try_result",
    # Sanitize
    "classify_type",
    "sanitize",
    "sanitize_values",
    # Errors
    "SqlChainError",
    "DatabaseError",
    "DatabaseConnectionError",
    "QueryError",
    "IntegrityError",
    "ConnectionCloseError",
    "SchemaError",
    "ValidationError",
    "MissingColumnError",
    "SanitizeError",
    "StatementError",
    "ConfigError",
]
