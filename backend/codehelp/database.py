"""SQLite database layer using aiosqlite.

Provides async database access with simple raw SQL, no ORM.
Tables: preset_codes.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import aiosqlite

from codehelp.config import settings

logger = logging.getLogger(__name__)

# Module-level database path, parsed from settings
_db_path: str = ""


def _resolve_db_path() -> str:
    """Parse the database URL into a file path (or :memory: for tests)."""
    url = settings.database_url
    if url == ":memory:" or url == "sqlite:///:memory:":
        return ":memory:"
    return url.removeprefix("sqlite:///")


async def init_db() -> None:
    """Create tables if they don't exist. Call once at startup."""
    global _db_path
    _db_path = _resolve_db_path()

    if _db_path != ":memory:":
        Path(_db_path).parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(_db_path) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS preset_codes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                query TEXT NOT NULL UNIQUE,
                code TEXT NOT NULL
            )
        """)
        await db.commit()

    logger.info("Database initialized at %s", _db_path)


@asynccontextmanager
async def get_db() -> AsyncGenerator[aiosqlite.Connection, None]:
    """Async context manager for database connections.

    Usage:
        async with get_db() as db:
            await db.execute("SELECT ...")
    """
    db = await aiosqlite.connect(_db_path)
    db.row_factory = aiosqlite.Row
    try:
        yield db
    finally:
        await db.close()
