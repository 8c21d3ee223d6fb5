"""
Tests for ``sqlchain.chain`` — state-threading chains.

Tests verify:
- Steps run in order and thread an immutable state
- apto/chain/log/then combinators
- A failure closes the connection once, calls the handler, returns Err
- The async runner mirrors the sync one
"""

import io
import json
import sqlite3
from dataclasses import FrozenInstanceError
from unittest.mock import MagicMock

import pytest

from sqlchain.aio import AsyncDatabase
from sqlchain.chain import Chain, ChainState, cursor, last_id
from sqlchain.core.adapters import AsyncSQLiteAdapter
from sqlchain.core.errors import MissingColumnError, SchemaError, StatementError
from sqlchain.core.logging import configure_logging
from sqlchain.core.result import Err, Ok
from sqlchain.core.types import WriteSummary
from sqlchain.database import Database


@pytest.fixture
def db(chinook_path):
    database = Database.open(chinook_path)
    yield database
    database.close()


def count_closes(database):
    calls = []
    original = database.close

    def close():
        calls.append(1)
        return original()

    database.close = close
    return calls


class TestChainState:
    def test_frozen(self):
        state = ChainState()
        with pytest.raises(FrozenInstanceError):
            state.cursor = [1]
        with pytest.raises(TypeError):
            state.values["x"] = 1

    def test_with_value_copies(self):
        state = ChainState()
        updated = state.with_value("ratm", 6).with_cursor(True)
        assert dict(state.values) == {}
        assert updated["ratm"] == 6
        assert cursor(updated) is True

    def test_last_id(self):
        assert last_id(ChainState(cursor=WriteSummary(last_id=9, changes=1))) == 9


class TestChainBuilder:
    def test_steps_are_appended_to_a_copy(self, db):
        base = Chain(db)
        extended = base.get_rows("artists", ["Name"])
        assert len(base) == 0
        assert len(extended) == 1
        assert extended.db is db


class TestChainRun:
    def test_create_apto_chain(self, db):
        result = (
            Chain(db)
            .create("artists", ["Name"], ["Rage Against The Machine"])
            .apto("ratm", last_id)
            .chain(lambda state: Chain().get_row("artists", "ArtistId", state["ratm"]))
            .close()
            .run()
        )
        state = result.unwrap()
        assert state["ratm"] == 6
        assert state.cursor == [{"ArtistId": 6, "Name": "Rage Against The Machine"}]
        assert db.is_closed

    def test_cursor_is_replaced_by_each_operation(self, db):
        state = (
            Chain(db)
            .exists("artists", "ArtistId", 1)
            .apto("found", cursor)
            .delete_row("artists", "ArtistId", 1)
            .exists("artists", "ArtistId", 1)
            .run()
            .unwrap()
        )
        assert state["found"] is True
        assert state.cursor is False

    def test_every_operation(self, db):
        state = (
            Chain(db)
            .create_many("artists", ["Name"], [["Tool"], ["Helmet"]])
            .update("artists", ["Name"], ["Kyuss"], "ArtistId = 7")
            .update_row("artists", ["Name"], ["AC/DC Live"], "ArtistId", 1)
            .read("artists", ["Name"], "ArtistId IN (1, 7)")
            .apto("renamed", cursor)
            .get_rows("artists", ["ArtistId"])
            .apto("count", lambda s: len(s.cursor))
            .delete("artists", "ArtistId > 5")
            .map("SELECT Name FROM artists WHERE ArtistId = 2", lambda r, s: r["Name"])
            .apto("second", cursor)
            .query("DELETE FROM artists WHERE ArtistId = 2")
            .query_rows("SELECT COUNT(*) AS n FROM artists")
            .apto("left", cursor)
            .delete_rows("artists")
            .run()
            .unwrap()
        )
        assert state["renamed"] == [{"Name": "AC/DC Live"}, {"Name": "Kyuss"}]
        assert state["count"] == 7
        assert state["second"] == ["Accept"]
        assert state["left"] == [{"n": 4}]
        assert state.cursor.changes == 4

    def test_then_receives_db_and_state(self, db):
        state = (
            Chain(db)
            .columns("artists")
            .then(lambda database, s: sorted(s.cursor))
            .run()
            .unwrap()
        )
        assert state.cursor == ["ArtistId", "Name"]

    def test_sanitize_values_step(self, db):
        state = Chain(db).sanitize_values("artists", ["Name"], ["Nine Inch Nails"]).run().unwrap()
        assert state.cursor == ['"Nine Inch Nails"']

    def test_map_receives_saved_values(self, db):
        state = (
            Chain(db)
            .apto("suffix", lambda s: " (live)")
            .map(
                "SELECT Name FROM artists WHERE ArtistId <= 2 ORDER BY ArtistId",
                lambda row, s: row["Name"] + s["suffix"],
            )
            .run()
            .unwrap()
        )
        assert state.cursor == ["AC/DC (live)", "Accept (live)"]

    def test_empty_delete_criteria_fails_without_deleting(self, db):
        result = Chain(db).delete("artists", "").run()
        assert isinstance(result.error, StatementError)
        with Database.open(db.path) as check:
            assert len(check.get_rows("artists", ["ArtistId"])) == 5

    def test_log_leaves_state_unchanged(self, db):
        stream = io.StringIO()
        configure_logging(level="INFO", json_format=True, stream=stream)
        state = (
            Chain(db)
            .exists("artists", "ArtistId", 1)
            .log()
            .log(lambda s: "custom", event="checkpoint")
            .run()
            .unwrap()
        )
        assert state.cursor is True
        events = [json.loads(line) for line in stream.getvalue().splitlines()]
        logged = [(e["event"], e["value"]) for e in events if "value" in e]
        assert logged == [("chain_log", True), ("checkpoint", "custom")]


class TestChainFailure:
    def test_failure_closes_once_and_calls_handler(self, db):
        closes = count_closes(db)
        seen = []
        after = MagicMock()

        result = (
            Chain(db)
            .create("artists", ["Nmae"], ["Tool"])
            .then(after)
            .fail(seen.append)
            .run()
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, MissingColumnError)
        assert seen == [result.error]
        assert closes == [1]
        assert db.is_closed
        after.assert_not_called()

    def test_failure_after_close_does_not_reopen(self, db):
        result = Chain(db).close().get_rows("artists", ["Name"]).run()
        assert result.is_err()
        assert "Connection is closed" in str(result.error)
        assert db.is_closed

    def test_failure_is_logged(self, db):
        stream = io.StringIO()
        configure_logging(level="INFO", json_format=True, stream=stream)
        Chain(db).columns("bands").get_rows("bands", ["Name"]).run()
        events = [json.loads(line) for line in stream.getvalue().splitlines()]
        (failed,) = [e for e in events if e["event"] == "chain_failed"]
        assert failed["error_type"] == "SchemaError"
        assert failed["context"] == {"table": "bands"}

    def test_without_handler(self, db):
        result = Chain(db).query("SELEC 1").run()
        with pytest.raises(Exception, match="Statement failed"):
            result.unwrap()

    def test_chain_callback_must_return_chain(self, db):
        result = Chain(db).chain(lambda state: None).run()
        assert isinstance(result.error, TypeError)
        assert db.is_closed

    def test_close_failure_is_attached(self, db):
        adapter = db.adapter
        real = adapter._conn
        broken = MagicMock()
        broken.close.side_effect = sqlite3.OperationalError("unable to close")
        adapter._conn = broken
        try:
            result = Chain(db).columns("artists").run()
        finally:
            real.close()
        assert isinstance(result.error, SchemaError)
        assert any("closing the connection also failed" in n for n in result.error.__notes__)

    def test_run_refuses_async_database(self):
        db = AsyncDatabase(AsyncSQLiteAdapter())
        with pytest.raises(TypeError, match="arun"):
            Chain(db).get_rows("artists", ["Name"]).run()


class TestChainArun:
    @pytest.mark.asyncio
    async def test_create_apto_chain(self, chinook_path):
        db = await AsyncDatabase.open(chinook_path)
        result = await (
            Chain(db)
            .create("artists", ["Name"], ["Tool"])
            .apto("tool", last_id)
            .chain(lambda state: Chain().exists("artists", "ArtistId", state["tool"]))
            .close()
            .arun()
        )
        match result:
            case Ok(state):
                assert state.cursor is True
                assert state["tool"] == 6
            case Err(error):
                pytest.fail(f"chain failed: {error}")
        assert db.is_closed

    @pytest.mark.asyncio
    async def test_map_receives_saved_values(self, chinook_path):
        db = await AsyncDatabase.open(chinook_path)
        result = await (
            Chain(db)
            .apto("offset", lambda s: 100)
            .map("SELECT ArtistId FROM artists ORDER BY ArtistId", lambda row, s: row["ArtistId"] + s["offset"])
            .close()
            .arun()
        )
        assert result.unwrap().cursor == [101, 102, 103, 104, 105]

    @pytest.mark.asyncio
    async def test_failure_awaits_async_handler(self, chinook_path):
        db = await AsyncDatabase.open(chinook_path)
        seen = []

        async def handler(error):
            seen.append(error)

        result = await Chain(db).create("artists", ["Nmae"], ["Tool"]).fail(handler).arun()
        assert isinstance(result.error, MissingColumnError)
        assert seen == [result.error]
        assert db.is_closed

    def test_sync_runner_rejects_async_steps(self, db):
        async def step(database, state):
            return 1

        result = Chain(db).then(step).run()
        assert isinstance(result.error, TypeError)
        assert "arun" in str(result.error)
