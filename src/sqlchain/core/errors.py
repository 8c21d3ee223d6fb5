"""
Structured error types for sqlchain.

Every failure that can surface from a chain of operations is one of a small
set of typed errors. Each carries a category for routing, a context with the
table/column/statement involved, and the underlying driver exception as its
cause.

Manifesto:
    - **Typed taxonomy:** One class per failure kind the caller can act on
    - **Rich context:** Errors carry the statement and table for logging
    - **Error chaining:** Driver exceptions are preserved as ``cause``
    - **Nothing swallowed:** Errors propagate; nothing here retries

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                      SqlChainError                          │
        │              (category, context, cause)                     │
        ├─────────────────────────────────────────────────────────────┤
        │                                                             │
        │  DatabaseError          ValidationError       ConfigError   │
        │  (DATABASE)             (VALIDATION)          (CONFIG)      │
        │       │                      │                              │
        │  DatabaseConnectionError MissingColumnError                 │
        │  QueryError              SanitizeError                     │
        │  IntegrityError          StatementError                    │
        │  ConnectionCloseError                                      │
        │                                                             │
        │  SchemaError (SCHEMA)                                       │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = MissingColumnError("artists", ["Nmae"])
    >>> error.columns
    ['Nmae']
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>

    >>> try:
    ...     raise sqlite3.OperationalError("near 'SELEC': syntax error")
    ... except sqlite3.Error as e:
    ...     raise QueryError("Statement failed", cause=e).with_context(statement="SELEC 1")
    Traceback (most recent call last):
    ...
    QueryError: Statement failed

Guardrails:
    ❌ DON'T: Raise bare ``Exception`` from an operation
    ✅ DO: Use the subclass matching the failure kind

    ❌ DON'T: Drop the driver exception
    ✅ DO: Pass it as ``cause=``

Tags:
    error-handling, exception-hierarchy, error-context, sqlchain

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and logging.

    Attributes:
        DATABASE: Connection open/close, statement execution
        SCHEMA: Table metadata could not be introspected
        VALIDATION: Missing columns, unsanitizable values, malformed input
        CONFIG: Invalid settings
        INTERNAL: A bug in sqlchain itself
        UNKNOWN: Exceptions from outside sqlchain
    """

    DATABASE = "DATABASE"
    SCHEMA = "SCHEMA"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set appear in ``to_dict()``; anything that does not
    fit a named field goes into ``metadata``.

    Examples:
        >>> ErrorContext(table="artists", statement="DELETE FROM artists").to_dict()
        {'table': 'artists', 'statement': 'DELETE FROM artists'}
    """

    table: str | None = None
    column: str | None = None
    statement: str | None = None
    path: str | None = None
    operation: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize set fields for logging."""
        result = {}
        for key in ("table", "column", "statement", "path", "operation"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        result.update(self.metadata)
        return result


class SqlChainError(Exception):
    """
    Base class for all sqlchain errors.

    Examples:
        >>> error = SqlChainError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(table="artists").context.table
        'artists'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SqlChainError:
        """
        Fill context fields (unknown keys go to ``metadata``) and return self.

        Usage:
            raise QueryError("Failed", cause=e).with_context(
                table="artists",
                statement=sql,
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Fields logged with ``chain_failed`` and returned by ``Err.to_dict()``."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(SqlChainError):
    """Database connection or statement error."""

    default_category = ErrorCategory.DATABASE


class DatabaseConnectionError(DatabaseError):
    """The database file could not be opened."""

    pass


class QueryError(DatabaseError):
    """The engine rejected or failed to execute a statement."""

    pass


class IntegrityError(QueryError):
    """Constraint violation (unique, not-null, foreign key, check)."""

    pass


class ConnectionCloseError(DatabaseError):
    """Closing the connection failed."""

    pass


# =============================================================================
# SCHEMA ERRORS
# =============================================================================


class SchemaError(SqlChainError):
    """Column metadata for a table could not be read."""

    default_category = ErrorCategory.SCHEMA


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(SqlChainError):
    """Caller input could not be turned into a statement."""

    default_category = ErrorCategory.VALIDATION


class MissingColumnError(ValidationError):
    """One or more referenced columns do not exist in the table."""

    def __init__(self, table: str, columns: list[str], **kwargs: Any):
        names = ", ".join(columns)
        super().__init__(f"Column does not exist in {table}: {names}", **kwargs)
        self.table = table
        self.columns = list(columns)
        self.context.table = table
        if len(columns) == 1:
            self.context.column = columns[0]

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["columns"] = self.columns
        return result


class SanitizeError(ValidationError):
    """A value could not be sanitized for its column type."""

    pass


class StatementError(ValidationError):
    """Statement inputs are malformed (length mismatch, empty row set)."""

    pass


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(SqlChainError):
    """Invalid configuration."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def categorize_error(error: Exception) -> ErrorCategory:
    """Category of any exception, sqlchain or not, for log routing."""
    if isinstance(error, SqlChainError):
        return error.category
    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.VALIDATION
    if isinstance(error, OSError):
        return ErrorCategory.DATABASE
    return ErrorCategory.UNKNOWN


__all__ = [
    # Category enum
    "ErrorCategory",
    # Context
    "ErrorContext",
    # Base
    "SqlChainError",
    # Database
    "DatabaseError",
    "DatabaseConnectionError",
    "QueryError",
    "IntegrityError",
    "ConnectionCloseError",
    # Schema
    "SchemaError",
    # Validation
    "ValidationError",
    "MissingColumnError",
    "SanitizeError",
    "StatementError",
    # Config
    "ConfigError",
    # Utilities
    "categorize_error",
]
