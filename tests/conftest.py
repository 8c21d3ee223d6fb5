"""
Shared pytest fixtures and configuration for sqlchain tests.

This module provides:
- A small Chinook-like ``artists`` database in a temp dir
- Settings and logging isolation between tests

Usage:
    def test_something(chinook_path):
        with Database.open(chinook_path) as db:
            ...
"""

import os
import sqlite3
import sys
from pathlib import Path

import pytest
import structlog

# Ensure sqlchain package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlchain.core.settings import reset_settings

ARTISTS = [
    (1, "AC/DC"),
    (2, "Accept"),
    (3, "Aerosmith"),
    (4, "Alanis Morissette"),
    (5, "Alice In Chains"),
]

SCHEMA = """
CREATE TABLE artists (
    ArtistId INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    Name NVARCHAR(120)
);
CREATE TABLE tracks (
    TrackId INTEGER PRIMARY KEY AUTOINCREMENT NOT NULL,
    Name NVARCHAR(200) NOT NULL,
    Milliseconds INTEGER NOT NULL,
    UnitPrice NUMERIC(10,2) NOT NULL,
    Rating DOUBLE,
    Artwork BLOB
);
"""


def build_chinook(path: Path) -> Path:
    conn = sqlite3.connect(path)
    try:
        conn.executescript(SCHEMA)
        conn.executemany("INSERT INTO artists (ArtistId, Name) VALUES (?, ?)", ARTISTS)
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def chinook_path(tmp_path) -> str:
    """Path of a fresh database holding ``artists`` (5 rows) and an empty ``tracks``."""
    return str(build_chinook(tmp_path / "chinook.db"))


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch):
    """Clear SQLCHAIN_* env vars and the cached settings around every test."""
    for name in [n for n in os.environ if n.startswith("SQLCHAIN_")]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SQLCHAIN_LOG_LEVEL", "WARNING")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any ``configure_logging()`` a test (or the CLI) performed."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
