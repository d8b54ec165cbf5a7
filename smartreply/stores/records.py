"""SqliteRecordStore: cached smart-reply records stored as JSON documents."""

from __future__ import annotations

import logging

from smartreply.models import SmartReplyRecord
from smartreply.stores.sqlite import SqliteStore

logger = logging.getLogger(__name__)


class SqliteRecordStore(SqliteStore):
    """Keyed document store. ``set`` always overwrites: last writer wins."""

    _CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS smart_replies (
        id TEXT PRIMARY KEY,
        data TEXT NOT NULL
    )
    """

    async def get(self, key: str) -> SmartReplyRecord | None:
        db = await self._connect()
        try:
            cursor = await db.execute("SELECT data FROM smart_replies WHERE id = ?", (key,))
            row = await cursor.fetchone()
            return SmartReplyRecord.model_validate_json(row["data"]) if row else None
        finally:
            await db.close()

    async def set(self, key: str, record: SmartReplyRecord) -> None:
        db = await self._connect()
        try:
            await db.execute(
                "INSERT OR REPLACE INTO smart_replies (id, data) VALUES (?, ?)",
                (key, record.model_dump_json()),
            )
            await db.commit()
            logger.debug("Wrote smart replies for %s", key)
        finally:
            await db.close()
