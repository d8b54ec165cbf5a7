"""Shared aiosqlite connection handling for the SQLite-backed stores."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import aiosqlite

from smartreply.config import settings

if TYPE_CHECKING:
    from pathlib import Path


class SqliteStore:
    """Base for stores that own one table.

    Each operation opens a short-lived connection; the table is created on the
    first connect. Pass an explicit *db_path* for test isolation
    (e.g. ``tmp_path / "test.db"``).
    """

    _CREATE_TABLE: ClassVar[str] = ""

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path or settings.database_path
        self._initialised = False

    async def _connect(self) -> aiosqlite.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        db = await aiosqlite.connect(str(self._db_path))
        db.row_factory = aiosqlite.Row
        if not self._initialised:
            await db.execute(self._CREATE_TABLE)
            await db.commit()
            self._initialised = True
        return db
