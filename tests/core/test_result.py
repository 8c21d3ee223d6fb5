"""Tests for ``sqlchain.core.result`` — Ok/Err envelope."""

from __future__ import annotations

import pytest

from sqlchain.core.errors import SanitizeError, SchemaError
from sqlchain.core.result import Err, Ok, try_result


class TestOk:
    def test_unwrap(self):
        assert Ok(42).unwrap() == 42
        assert Ok(42).is_ok() and not Ok(42).is_err()

    def test_map_and_flat_map(self):
        assert Ok(10).map(lambda x: x * 2).unwrap() == 20
        assert Ok(10).flat_map(lambda x: Ok(x + 1)).unwrap() == 11

    def test_inspect(self):
        seen = []
        Ok(1).inspect(seen.append).inspect_err(seen.append)
        assert seen == [1]

    def test_to_dict(self):
        assert Ok(True).to_dict() == {"ok": True, "value": True}


class TestErr:
    def test_unwrap_raises_original(self):
        error = SchemaError("No such table: nope")
        with pytest.raises(SchemaError) as exc_info:
            Err(error).unwrap()
        assert exc_info.value is error

    def test_short_circuits(self):
        err = Err(ValueError("oops"))
        assert err.map(lambda x: x * 2).unwrap_or(0) == 0
        assert err.flat_map(lambda x: Ok(x)).is_err()

    def test_inspect_err(self):
        seen = []
        error = ValueError("oops")
        Err(error).inspect(seen.append).inspect_err(seen.append)
        assert seen == [error]

    def test_to_dict(self):
        assert Err(SchemaError("gone")).to_dict()["error"]["category"] == "SCHEMA"
        assert Err(ValueError("bad")).to_dict() == {
            "ok": False,
            "error": {"error_type": "ValueError", "message": "bad"},
        }

    def test_pattern_matching(self):
        match Err(ValueError("bad")):
            case Ok(_):
                pytest.fail("expected Err")
            case Err(error):
                assert str(error) == "bad"


class TestTryResult:
    def test_ok(self):
        assert try_result(lambda: int("42")) == Ok(42)

    def test_err_keeps_exception(self):
        result = try_result(lambda: int("x"))
        assert isinstance(result.error, ValueError)

    def test_error_mapper(self):
        result = try_result(lambda: int("x"), error_mapper=lambda e: SanitizeError(str(e), cause=e))
        assert isinstance(result.error, SanitizeError)
        assert isinstance(result.error.cause, ValueError)
