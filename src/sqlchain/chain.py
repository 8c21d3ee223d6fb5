"""
State-threading chains of database operations.

A :class:`Chain` is an immutable list of steps bound to one database. Running
it threads a :class:`ChainState` through the steps strictly in order: each
operation step replaces the state's ``cursor`` with the operation's result,
``apto`` steps save derived values by name, and ``chain`` steps splice in a
sub-chain built from the state so far.

Manifesto:
    - **One step at a time:** No two operations share the connection at once
    - **Immutable state:** Every step returns a new ``ChainState``
    - **Close on failure:** Any error closes the connection exactly once,
      is logged, goes to the failure handler, and comes back as ``Err``

Architecture:
    ::

        Chain(db)
          .create("artists", ["Name"], ["Tool"])     cursor = WriteSummary
          .apto("tool", last_id)                     values["tool"] = 276
          .chain(lambda s: Chain()
              .get_row("artists", "ArtistId", s["tool"]))
          .log()                                      logs cursor
          .close()
          .fail(handler)
          .run()  ──► Ok(ChainState) | Err(error)

Examples:
    >>> result = (
    ...     Chain(Database.open("chinook.db"))
    ...     .create("artists", ["Name"], ["Rage Against The Machine"])
    ...     .apto("ratm", last_id)
    ...     .chain(lambda state: Chain().exists("artists", "ArtistId", state["ratm"]))
    ...     .close()
    ...     .run()
    ... )
    >>> result.unwrap().cursor
    True

    Async databases run the same chain with ``await chain.arun()``.

Guardrails:
    ❌ DON'T: Call ``run()`` on a chain over an ``AsyncDatabase``
    ✅ DO: ``await chain.arun()``

Tags:
    chain, state-threading, fluent-api, result-pattern, sqlchain

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from sqlchain.core.errors import ConnectionCloseError
from sqlchain.core.logging import get_logger
from sqlchain.core.result import Err, Ok, Result
from sqlchain.core.types import Cursor, Row

logger = get_logger(__name__)

FailureHandler = Callable[[Exception], Any]


@dataclass(frozen=True)
class ChainState:
    """Result of the most recent operation plus the values saved so far."""

    cursor: Cursor = field(default_factory=list)
    values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def with_cursor(self, cursor: Cursor) -> ChainState:
        return replace(self, cursor=cursor)

    def with_value(self, name: str, value: Any) -> ChainState:
        return replace(self, values=MappingProxyType({**self.values, name: value}))

    def __getitem__(self, name: str) -> Any:
        return self.values[name]


def cursor(state: ChainState) -> Cursor:
    """The cursor of ``state``."""
    return state.cursor


def last_id(state: ChainState) -> int | None:
    """Last inserted row id from a write cursor."""
    return state.cursor.last_id


@dataclass(frozen=True)
class _Step:
    name: str
    call: Callable[[Any, ChainState], Any]
    apply: Callable[[ChainState, Any], ChainState]
    splice: bool = False


def _keep(state: ChainState, value: Any) -> ChainState:
    return state


def _store_cursor(state: ChainState, value: Any) -> ChainState:
    return state.with_cursor(value)


def _sub_steps(value: Any) -> tuple[_Step, ...]:
    if not isinstance(value, Chain):
        raise TypeError(f"chain() callback must return a Chain, got {type(value).__name__}")
    return value._steps


class Chain:
    """Fluent, immutable builder of a sequence of database operations."""

    def __init__(
        self,
        db: Any = None,
        *,
        steps: tuple[_Step, ...] = (),
        on_failure: FailureHandler | None = None,
    ):
        self._db = db
        self._steps = steps
        self._on_failure = on_failure

    @property
    def db(self) -> Any:
        return self._db

    def __len__(self) -> int:
        return len(self._steps)

    def _append(self, step: _Step) -> Chain:
        return Chain(self._db, steps=self._steps + (step,), on_failure=self._on_failure)

    def _op(self, name: str, *args: Any) -> Chain:
        return self._append(
            _Step(name, lambda db, state: getattr(db, name)(*args), _store_cursor)
        )

    # -- Operations --------------------------------------------------------

    def create(self, table: str, columns: Sequence[str], values: Sequence[Any]) -> Chain:
        return self._op("create", table, columns, values)

    def create_many(self, table: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> Chain:
        return self._op("create_many", table, columns, rows)

    def read(self, table: str, columns: Sequence[str], criteria: str) -> Chain:
        return self._op("read", table, columns, criteria)

    def get_row(self, table: str, column: str, value: Any) -> Chain:
        return self._op("get_row", table, column, value)

    def get_rows(self, table: str, columns: Sequence[str]) -> Chain:
        return self._op("get_rows", table, columns)

    def exists(self, table: str, column: str, value: Any) -> Chain:
        return self._op("exists", table, column, value)

    def update(self, table: str, columns: Sequence[str], values: Sequence[Any], criteria: str) -> Chain:
        return self._op("update", table, columns, values, criteria)

    def update_row(
        self,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        criteria_column: str,
        criteria_value: Any,
    ) -> Chain:
        return self._op("update_row", table, columns, values, criteria_column, criteria_value)

    def delete(self, table: str, criteria: str) -> Chain:
        return self._op("delete", table, criteria)

    def delete_row(self, table: str, column: str, value: Any) -> Chain:
        return self._op("delete_row", table, column, value)

    def delete_rows(self, table: str) -> Chain:
        return self._op("delete_rows", table)

    def query(self, sql: str) -> Chain:
        return self._op("query", sql)

    def query_rows(self, sql: str) -> Chain:
        return self._op("query_rows", sql)

    def map(self, sql: str, fn: Callable[[Row, ChainState], Any]) -> Chain:
        """Cursor is ``[fn(row, state) for row in rows]``."""
        return self._append(
            _Step("map", lambda db, state: db.map(sql, lambda row: fn(row, state)), _store_cursor)
        )

    def columns(self, table: str) -> Chain:
        return self._op("columns", table)

    def sanitize_values(self, table: str, column_names: Sequence[str], values: Sequence[Any]) -> Chain:
        return self._op("sanitize_values", table, column_names, values)

    def close(self) -> Chain:
        return self._append(_Step("close", lambda db, state: db.close(), _keep))

    # -- Combinators -------------------------------------------------------

    def apto(self, name: str, fn: Callable[[ChainState], Any]) -> Chain:
        """Save ``fn(state)`` as ``state.values[name]``."""
        return self._append(
            _Step("apto", lambda db, state: fn(state), lambda state, value: state.with_value(name, value))
        )

    def log(self, fn: Callable[[ChainState], Any] = cursor, event: str = "chain_log") -> Chain:
        """Log ``fn(state)``; the state is unchanged."""

        def _log(state: ChainState, value: Any) -> ChainState:
            logger.info(event, value=value)
            return state

        return self._append(_Step("log", lambda db, state: fn(state), _log))

    def then(self, fn: Callable[[Any, ChainState], Any]) -> Chain:
        """Store ``fn(db, state)`` as the cursor."""
        return self._append(_Step("then", fn, _store_cursor))

    def chain(self, fn: Callable[[ChainState], Chain]) -> Chain:
        """Run the chain ``fn(state)`` returns, on this chain's database, then continue."""
        return self._append(_Step("chain", lambda db, state: fn(state), _keep, splice=True))

    def fail(self, handler: FailureHandler) -> Chain:
        """Call ``handler`` with the raw error if the chain fails."""
        return Chain(self._db, steps=self._steps, on_failure=handler)

    # -- Execution ---------------------------------------------------------

    def run(self) -> Result[ChainState]:
        """Run every step in order against a synchronous ``Database``."""
        if inspect.iscoroutinefunction(getattr(self._db, "close", None)):
            raise TypeError("Chain is bound to an async database; use arun()")
        logger.debug("chain_started", steps=len(self._steps))
        try:
            state = self._run_steps(self._steps, ChainState())
        except Exception as e:
            self._close_after_failure(e)
            self._report(e)
            return Err(e)
        logger.debug("chain_completed", steps=len(self._steps))
        return Ok(state)

    async def arun(self) -> Result[ChainState]:
        """Run every step in order, awaiting async operations."""
        logger.debug("chain_started", steps=len(self._steps))
        try:
            state = await self._arun_steps(self._steps, ChainState())
        except Exception as e:
            await self._aclose_after_failure(e)
            outcome = self._report(e)
            if inspect.isawaitable(outcome):
                await outcome
            return Err(e)
        logger.debug("chain_completed", steps=len(self._steps))
        return Ok(state)

    def _run_steps(self, steps: tuple[_Step, ...], state: ChainState) -> ChainState:
        for step in steps:
            value = step.call(self._db, state)
            if inspect.isawaitable(value):
                if inspect.iscoroutine(value):
                    value.close()
                raise TypeError(f"Step {step.name!r} is async; use arun()")
            state = self._run_steps(_sub_steps(value), state) if step.splice else step.apply(state, value)
        return state

    async def _arun_steps(self, steps: tuple[_Step, ...], state: ChainState) -> ChainState:
        for step in steps:
            value = step.call(self._db, state)
            if inspect.isawaitable(value):
                value = await value
            state = await self._arun_steps(_sub_steps(value), state) if step.splice else step.apply(state, value)
        return state

    def _close_after_failure(self, error: Exception) -> None:
        if self._db is None:
            return
        try:
            self._db.close()
        except ConnectionCloseError as close_error:
            self._note_close_failure(error, close_error)

    async def _aclose_after_failure(self, error: Exception) -> None:
        if self._db is None:
            return
        try:
            closing = self._db.close()
            if inspect.isawaitable(closing):
                await closing
        except ConnectionCloseError as close_error:
            self._note_close_failure(error, close_error)

    @staticmethod
    def _note_close_failure(error: Exception, close_error: ConnectionCloseError) -> None:
        logger.error("connection_close_failed", **close_error.to_dict())
        error.add_note(f"closing the connection also failed: {close_error}")

    def _report(self, error: Exception) -> Any:
        details = error.to_dict() if hasattr(error, "to_dict") else {"message": str(error)}
        details.setdefault("error_type", type(error).__name__)
        logger.error("chain_failed", **details)
        if self._on_failure is not None:
            return self._on_failure(error)
        return None


__all__ = [
    "ChainState",
    "Chain",
    "cursor",
    "last_id",
]
