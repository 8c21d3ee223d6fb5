"""Tests for ``sqlchain.core.sanitize`` — type classification and value coercion."""

from __future__ import annotations

import math

import pytest

from sqlchain.core.errors import MissingColumnError, SanitizeError, StatementError
from sqlchain.core.sanitize import (
    NAN,
    classify_type,
    format_number,
    parse_float,
    parse_int,
    quote_text,
    sanitize,
    sanitize_values,
    to_number,
)
from sqlchain.core.types import ColumnInfo, TypeClass


class TestClassifyType:
    @pytest.mark.parametrize(
        "declared, expected",
        [
            ("INTEGER", TypeClass.INTEGER),
            ("BIGINT", TypeClass.INTEGER),
            ("NVARCHAR(120)", TypeClass.TEXT),
            ("TEXT", TypeClass.TEXT),
            ("CLOB", TypeClass.TEXT),
            ("BLOB", TypeClass.BLOB),
            ("DOUBLE", TypeClass.REAL),
            ("FLOAT", TypeClass.REAL),
            ("REAL", TypeClass.REAL),
            ("NUMERIC(10,2)", TypeClass.NUMERIC),
            ("DATETIME", TypeClass.NUMERIC),
        ],
    )
    def test_affinity(self, declared, expected):
        assert classify_type(declared) is expected

    def test_priority_order(self):
        # INT is checked before CHAR, CHAR/TEXT before BLOB
        assert classify_type("CHARINT") is TypeClass.INTEGER
        assert classify_type("BLOBTEXT") is TypeClass.TEXT
        assert classify_type("FLOATING POINT") is TypeClass.INTEGER

    def test_case_sensitive(self):
        assert classify_type("varchar(10)") is TypeClass.NUMERIC
        assert classify_type("integer") is TypeClass.NUMERIC

    def test_empty_or_missing(self):
        assert classify_type("") is TypeClass.NUMERIC
        assert classify_type(None) is TypeClass.NUMERIC


class TestParsing:
    def test_parse_int_leading_digits(self):
        assert parse_int("12abc") == 12
        assert parse_int("  -5") == -5
        assert parse_int("0x1A") == 26
        assert parse_int(3.9) == 3

    def test_parse_int_failure(self):
        assert math.isnan(parse_int("abc"))
        assert math.isnan(parse_int("0x"))
        assert math.isnan(parse_int(None))
        assert math.isnan(parse_int(True))
        assert math.isnan(parse_float(None))

    def test_parse_float(self):
        assert parse_float("2.5kg") == 2.5
        assert parse_float(".5") == 0.5
        assert parse_float("1e3") == 1000.0
        assert parse_float("-Infinity") == -math.inf
        assert math.isnan(parse_float("kg"))

    def test_to_number_whole_value(self):
        assert to_number(" 42 ") == 42.0
        assert to_number("0x10") == 16
        assert to_number("0b11") == 3
        assert to_number("0o17") == 15
        assert to_number("") == 0
        assert to_number(None) == 0
        assert to_number(True) == 1
        assert math.isnan(to_number("12abc"))

    def test_format_number(self):
        assert format_number(1000.0) == "1000"
        assert format_number(0.5) == "0.5"
        assert format_number(math.nan) == NAN
        assert format_number(-math.inf) == "-Infinity"
        assert format_number(1e21) == "1e+21"
        assert format_number(False) == "0"


class TestSanitize:
    def test_text_wraps_in_double_quotes_without_escaping(self):
        assert sanitize(TypeClass.TEXT, "O'Reilly") == '"O\'Reilly"'
        assert sanitize(TypeClass.TEXT, 'say "hi"') == '"say "hi""'

    def test_text_renders_none_and_booleans_like_template_literals(self):
        assert sanitize(TypeClass.TEXT, None) == '"null"'
        assert sanitize(TypeClass.TEXT, True) == '"true"'
        assert sanitize(TypeClass.TEXT, False) == '"false"'
        assert sanitize(TypeClass.TEXT, 2.0) == '"2"'
        assert quote_text(None, "single") == "'null'"

    def test_text_single_quoting_escapes(self):
        assert sanitize(TypeClass.TEXT, "O'Reilly", quoting="single") == "'O''Reilly'"
        assert quote_text(42, "single") == "'42'"

    def test_integer(self):
        assert sanitize(TypeClass.INTEGER, "42") == "42"
        assert sanitize(TypeClass.INTEGER, 42) == "42"
        assert sanitize(TypeClass.INTEGER, "abc") == "NaN"

    def test_real(self):
        assert sanitize(TypeClass.REAL, "3.14") == "3.14"
        assert sanitize(TypeClass.REAL, 7) == "7"
        assert sanitize(TypeClass.REAL, "x") == "NaN"

    def test_numeric(self):
        assert sanitize(TypeClass.NUMERIC, "10.50") == "10.5"
        assert sanitize(TypeClass.NUMERIC, "") == "0"
        assert sanitize(TypeClass.NUMERIC, "12abc") == "NaN"

    def test_blob_passes_through_unchanged(self):
        payload = b"\x00\x01"
        assert sanitize(TypeClass.BLOB, payload) is payload

    def test_strict_rejects_nan(self):
        with pytest.raises(SanitizeError):
            sanitize(TypeClass.INTEGER, "abc", strict=True)
        assert sanitize(TypeClass.INTEGER, "7", strict=True) == "7"

    def test_unknown_type_class(self):
        with pytest.raises(SanitizeError, match="unknown column type"):
            sanitize("GEOMETRY", 1)


class TestSanitizeValues:
    @pytest.fixture
    def columns(self):
        return {
            "ArtistId": ColumnInfo(0, "ArtistId", "INTEGER", pk=1),
            "Name": ColumnInfo(1, "Name", "NVARCHAR(120)"),
        }

    def test_positional_fragments(self, columns):
        assert sanitize_values(columns, ["Name"], ["Nine Inch Nails"]) == ['"Nine Inch Nails"']
        assert sanitize_values(columns, ["ArtistId", "Name"], ["7", "Tool"]) == ["7", '"Tool"']

    def test_missing_column(self, columns):
        with pytest.raises(MissingColumnError) as exc_info:
            sanitize_values(columns, ["Nmae"], ["x"], table="artists")
        assert exc_info.value.columns == ["Nmae"]
        assert exc_info.value.context.table == "artists"

    def test_all_missing_columns_reported(self, columns):
        with pytest.raises(MissingColumnError) as exc_info:
            sanitize_values(columns, ["Nmae", "Name", "Genre"], ["a", "b", "c"], table="artists")
        assert exc_info.value.columns == ["Nmae", "Genre"]
        assert "Nmae, Genre" in str(exc_info.value)

    def test_length_mismatch(self, columns):
        with pytest.raises(StatementError):
            sanitize_values(columns, ["Name"], ["a", "b"], table="artists")
