"""Preset code store: the query → code snippets served to the editor.

All preset persistence flows through here.
"""

from __future__ import annotations

import sqlite3

from codehelp.database import get_db
from codehelp.errors import DuplicatePresetError
from codehelp.models import PresetCode


async def create_preset(query: str, code: str) -> PresetCode:
    """Insert a preset. Raises DuplicatePresetError if the query is taken."""
    async with get_db() as db:
        try:
            cursor = await db.execute(
                "INSERT INTO preset_codes (query, code) VALUES (?, ?)",
                (query, code),
            )
        except sqlite3.IntegrityError as exc:
            raise DuplicatePresetError(f"preset already exists for query {query!r}") from exc
        await db.commit()
        preset_id = cursor.lastrowid

    return PresetCode(id=preset_id, query=query, code=code)


async def get_preset_by_query(query: str) -> PresetCode | None:
    """Fetch a preset by its query. Returns None if not found."""
    async with get_db() as db:
        cursor = await db.execute(
            "SELECT id, query, code FROM preset_codes WHERE query = ?",
            (query,),
        )
        row = await cursor.fetchone()

    if row is None:
        return None
    return PresetCode(id=row[0], query=row[1], code=row[2])


async def list_presets() -> list[PresetCode]:
    """List all presets, newest first."""
    async with get_db() as db:
        cursor = await db.execute(
            "SELECT id, query, code FROM preset_codes ORDER BY id DESC"
        )
        rows = await cursor.fetchall()

    return [PresetCode(id=row[0], query=row[1], code=row[2]) for row in rows]


async def delete_preset(preset_id: int) -> bool:
    """Delete a preset by id. Returns False if not found."""
    async with get_db() as db:
        cursor = await db.execute(
            "SELECT id FROM preset_codes WHERE id = ?", (preset_id,)
        )
        if await cursor.fetchone() is None:
            return False

        await db.execute("DELETE FROM preset_codes WHERE id = ?", (preset_id,))
        await db.commit()

    return True
