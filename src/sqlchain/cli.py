"""
CLI: ``sqlchain`` — run operations against a SQLite file from the shell.

Every command opens the database, runs one operation as a chain, closes the
connection, and renders the cursor. Failures are printed to stderr and exit
with status 1.
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, is_dataclass
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sqlchain import __version__
from sqlchain.chain import Chain, ChainState
from sqlchain.core.errors import SqlChainError
from sqlchain.core.logging import configure_logging
from sqlchain.core.result import Err, Ok, try_result
from sqlchain.core.settings import get_settings
from sqlchain.core.types import ColumnInfo, OpenMode
from sqlchain.database import Database

app = typer.Typer(
    name="sqlchain",
    help="sqlchain — chained CRUD operations over SQLite.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)

_MODE_HELP = "Open mode: ro, rw, rwc or memory."


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError, version as pkg_version

        try:
            v = pkg_version("sqlchain")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"sqlchain {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """sqlchain CLI — query, inspect and read rows of a SQLite database."""
    try:
        settings = get_settings()
    except SqlChainError as e:
        _fail(e)
    configure_logging(level=settings.log_level, json_format=settings.json_logs, stream=sys.stderr)


# ── Helpers ──────────────────────────────────────────────────────────────


def _run(database: str, mode: OpenMode | None, build) -> ChainState:
    """Open ``database``, run ``build(chain)`` followed by a close, render errors."""
    opened = try_result(lambda: Database.open(database, mode))
    match opened.flat_map(lambda db: build(Chain(db)).close().run()):
        case Ok(state):
            return state
        case Err(error):
            _fail(error)


def _fail(error: Exception) -> None:
    err_console.print(f"[bold red]Error[/bold red] ({type(error).__name__}): {escape(str(error))}")
    raise typer.Exit(code=1)


def _to_dict(obj: Any) -> dict[str, Any]:
    if isinstance(obj, ColumnInfo):
        return {**asdict(obj), "type_class": obj.type_class.value}
    if is_dataclass(obj):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": obj}


def _output(data: Any, *, as_json: bool, title: str = "") -> None:
    if as_json:
        payload = [_to_dict(d) for d in data] if isinstance(data, list) else _to_dict(data)
        console.print_json(json.dumps(payload, default=str))
        return

    if isinstance(data, list):
        if not data:
            console.print("[dim]No rows.[/dim]")
            return
        rows = [_to_dict(d) for d in data]
        table = Table(title=title or None, pad_edge=False)
        for col in rows[0]:
            table.add_column(col, overflow="fold")
        for row in rows:
            table.add_row(*(escape(str(v)) for v in row.values()))
        console.print(table)
        return

    for key, value in _to_dict(data).items():
        console.print(f"[bold]{key}[/bold]: {escape(str(value))}")


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def query(
    database: str = typer.Argument(..., help="Database file"),
    sql: str = typer.Argument(..., help="Statement to run"),
    mode: OpenMode | None = typer.Option(None, "--mode", "-m", help=_MODE_HELP),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Run a statement for its side effect and show the write summary."""
    state = _run(database, mode, lambda chain: chain.query(sql))
    _output(state.cursor, as_json=json_out)


@app.command()
def rows(
    database: str = typer.Argument(..., help="Database file"),
    sql: str = typer.Argument(..., help="Query to run"),
    mode: OpenMode | None = typer.Option(None, "--mode", "-m", help=_MODE_HELP),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Run a query and show every row."""
    state = _run(database, mode, lambda chain: chain.query_rows(sql))
    _output(state.cursor, as_json=json_out, title="Rows")


@app.command()
def columns(
    database: str = typer.Argument(..., help="Database file"),
    table: str = typer.Argument(..., help="Table name"),
    mode: OpenMode | None = typer.Option(None, "--mode", "-m", help=_MODE_HELP),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show column metadata and the type class used for sanitizing."""
    state = _run(database, mode, lambda chain: chain.columns(table))
    _output(list(state.cursor.values()), as_json=json_out, title=table)


@app.command()
def get(
    database: str = typer.Argument(..., help="Database file"),
    table: str = typer.Argument(..., help="Table name"),
    column: str = typer.Argument(..., help="Key column"),
    value: str = typer.Argument(..., help="Key value"),
    mode: OpenMode | None = typer.Option(None, "--mode", "-m", help=_MODE_HELP),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show the row where COLUMN equals VALUE."""
    state = _run(database, mode, lambda chain: chain.get_row(table, column, value))
    _output(state.cursor, as_json=json_out, title=table)


@app.command()
def exists(
    database: str = typer.Argument(..., help="Database file"),
    table: str = typer.Argument(..., help="Table name"),
    column: str = typer.Argument(..., help="Key column"),
    value: str = typer.Argument(..., help="Key value"),
    mode: OpenMode | None = typer.Option(None, "--mode", "-m", help=_MODE_HELP),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Print whether a row where COLUMN equals VALUE exists."""
    state = _run(database, mode, lambda chain: chain.exists(table, column, value))
    if json_out:
        console.print_json(json.dumps({"exists": state.cursor}))
    else:
        console.print("yes" if state.cursor else "no")


if __name__ == "__main__":
    app()
