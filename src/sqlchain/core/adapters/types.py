"""Database connection configuration."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from sqlchain.core.types import OpenMode

MEMORY_PATH = ":memory:"


@dataclass
class DatabaseConfig:
    """
    Where and how to open a database.

    A ``None`` or ``":memory:"`` path, or ``OpenMode.MEMORY``, opens a private
    in-memory database.
    """

    path: str | None = None
    mode: OpenMode = OpenMode.READWRITE_CREATE
    timeout: float = 5.0

    @property
    def in_memory(self) -> bool:
        return self.mode is OpenMode.MEMORY or self.path in (None, "", MEMORY_PATH)

    def to_connect_target(self) -> tuple[str, bool]:
        """``(database, uri)`` arguments for ``sqlite3.connect``."""
        if self.in_memory:
            return MEMORY_PATH, False
        path = self.path or MEMORY_PATH
        if path.startswith("file:"):
            return path, True
        return f"file:{quote(path)}?mode={self.mode.value}", True


__all__ = [
    "MEMORY_PATH",
    "DatabaseConfig",
]
