"""
Column-type driven value sanitization.

Values are turned into literal SQL fragments according to the type class of
the column they are written to. Coercion is permissive:
INTEGER and REAL parse a leading number, NUMERIC takes the whole
value, and anything unparseable becomes the token ``NaN`` rather than an
error. TEXT values are wrapped in double quotes with no escaping.

Manifesto:
    Callers get a drop-in literal for every value without writing per-column
    casts. The price is that the default TEXT quoting is an injection hazard:
    ``O'Reilly`` is safe, but a value containing ``"`` breaks the statement,
    and a double-quoted string equal to a column name is read as that column.
    Use ``quoting="single"`` for escaped SQL string literals and
    ``strict=True`` to reject unparseable numbers.

Architecture:
    ::

        declared type ──► classify_type() ──► TypeClass
                                                 │
        value ──────────────────────────► sanitize() ──► fragment
                                                 │
        columns_by_name + names + values ► sanitize_values() ──► [fragment, ...]

Examples:
    >>> classify_type("VARCHAR(255)")
    <TypeClass.TEXT: 'TEXT'>
    >>> sanitize(TypeClass.INTEGER, "42")
    '42'
    >>> sanitize(TypeClass.INTEGER, "abc")
    'NaN'
    >>> sanitize(TypeClass.TEXT, "O'Reilly")
    '"O\\'Reilly"'
    >>> sanitize(TypeClass.TEXT, "O'Reilly", quoting="single")
    "'O''Reilly'"

Tags:
    sanitize, type-affinity, sqlite, literal-sql, sqlchain

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from typing import Any, Literal

from sqlchain.core.errors import MissingColumnError, SanitizeError, StatementError
from sqlchain.core.types import ColumnInfo, TypeClass

Quoting = Literal["double", "single"]

NAN = "NaN"

_INT_PREFIX = re.compile(r"\s*([+-]?)(?:0[xX]([0-9a-fA-F]*)|(\d+))")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")
_DECIMAL = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_RADIX = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")

# Checked in order; first match wins.
_AFFINITY_RULES: tuple[tuple[TypeClass, tuple[str, ...]], ...] = (
    (TypeClass.INTEGER, ("INT",)),
    (TypeClass.TEXT, ("CHAR", "TEXT", "CLOB")),
    (TypeClass.BLOB, ("BLOB",)),
    (TypeClass.REAL, ("REAL", "FLOA", "DOUB")),
)


def classify_type(declared_type: str | None) -> TypeClass:
    """Derive the type class of a declared SQL type (case-sensitive)."""
    declared = declared_type or ""
    for type_class, needles in _AFFINITY_RULES:
        if any(needle in declared for needle in needles):
            return type_class
    return TypeClass.NUMERIC


def format_number(number: int | float) -> str:
    """Decimal text of a number as it would be interpolated into SQL."""
    if isinstance(number, bool):
        return "1" if number else "0"
    if isinstance(number, int):
        return str(number)
    if math.isnan(number):
        return NAN
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    return repr(number)


def _as_text(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def parse_int(value: Any) -> int | float:
    """Leading-integer parse; ``nan`` when no digits lead the text."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    match = _INT_PREFIX.match(_as_text(value))
    if match is None:
        return math.nan
    sign, hex_digits, digits = match.groups()
    if hex_digits is not None:
        if not hex_digits:
            return math.nan
        number = int(hex_digits, 16)
    else:
        number = int(digits)
    return -number if sign == "-" else number


def parse_float(value: Any) -> float:
    """Longest-leading-float parse; ``nan`` when nothing parses."""
    match = _FLOAT_PREFIX.match(_as_text(value))
    if match is None:
        return math.nan
    return float(match.group(1))


def to_number(value: Any) -> int | float:
    """Whole-value numeric conversion; ``nan`` when the value is not numeric."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    if not text:
        return 0
    if _RADIX.fullmatch(text):
        return int(text, 0)
    if _DECIMAL.fullmatch(text):
        return float(text)
    return math.nan


def _is_nan(number: int | float) -> bool:
    return isinstance(number, float) and math.isnan(number)


def quote_text(value: Any, quoting: Quoting = "double") -> str:
    text = _as_text(value)
    if quoting == "single":
        return "'" + text.replace("'", "''") + "'"
    return f'"{text}"'


def sanitize(
    type_class: TypeClass,
    value: Any,
    *,
    quoting: Quoting = "double",
    strict: bool = False,
) -> Any:
    """
    Turn ``value`` into a literal SQL fragment for a column of ``type_class``.

    BLOB values are returned unchanged; every other class returns ``str``.

    Raises:
        SanitizeError: ``type_class`` is not a recognized class, or ``strict``
            is set and a numeric parse failed.
    """
    match type_class:
        case TypeClass.INTEGER:
            number = parse_int(value)
        case TypeClass.REAL:
            number = parse_float(value)
        case TypeClass.NUMERIC:
            number = to_number(value)
        case TypeClass.TEXT:
            return quote_text(value, quoting)
        case TypeClass.BLOB:
            return value
        case _:
            raise SanitizeError(f"Could not sanitize value for unknown column type: {type_class!r}")

    if strict and _is_nan(number):
        raise SanitizeError(f"Value {value!r} is not a valid {type_class.value} literal")
    return format_number(number)


def sanitize_values(
    columns_by_name: Mapping[str, ColumnInfo],
    column_names: Sequence[str],
    values: Sequence[Any],
    *,
    table: str = "",
    quoting: Quoting = "double",
    strict: bool = False,
) -> list[Any]:
    """
    Sanitize ``values[i]`` against the column named ``column_names[i]``.

    Every name is checked before raising, so a single ``MissingColumnError``
    lists all columns absent from ``columns_by_name``.
    """
    if len(column_names) != len(values):
        raise StatementError(
            f"Got {len(values)} values for {len(column_names)} columns"
        ).with_context(table=table or None)

    missing: list[str] = []
    fragments: list[Any] = []
    for name, value in zip(column_names, values):
        column = columns_by_name.get(name)
        if column is None:
            missing.append(name)
            continue
        fragments.append(
            sanitize(column.type_class, value, quoting=quoting, strict=strict)
        )

    if missing:
        raise MissingColumnError(table, missing)
    return fragments


__all__ = [
    "NAN",
    "Quoting",
    "classify_type",
    "format_number",
    "parse_int",
    "parse_float",
    "to_number",
    "quote_text",
    "sanitize",
    "sanitize_values",
]
