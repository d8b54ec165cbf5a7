"""MessageStore: aiosqlite persistence for conversation messages."""

from __future__ import annotations

import logging

from smartreply.models import ConversationMessage
from smartreply.stores.sqlite import SqliteStore

logger = logging.getLogger(__name__)


class MessageStore(SqliteStore):
    """Messages keyed by (conversation_id, id). Read side of the pipeline."""

    _CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS messages (
        id TEXT NOT NULL,
        conversation_id TEXT NOT NULL,
        text TEXT NOT NULL,
        sender_id TEXT NOT NULL,
        timestamp_ms INTEGER NOT NULL,
        language TEXT NOT NULL DEFAULT 'en',
        tone TEXT NOT NULL DEFAULT 'neutral',
        PRIMARY KEY (conversation_id, id)
    )
    """

    async def add_message(self, conversation_id: str, message: ConversationMessage) -> None:
        """Insert or replace a message."""
        db = await self._connect()
        try:
            await db.execute(
                """
                INSERT OR REPLACE INTO messages
                    (id, conversation_id, text, sender_id, timestamp_ms, language, tone)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    message.id,
                    conversation_id,
                    message.text,
                    message.sender_id,
                    message.timestamp_ms,
                    message.language,
                    message.tone,
                ),
            )
            await db.commit()
            logger.debug("Stored message %s in %s", message.id, conversation_id)
        finally:
            await db.close()

    async def get_recent_messages(
        self, conversation_id: str, limit: int = 30
    ) -> list[ConversationMessage]:
        """Return up to *limit* messages, newest first."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                """
                SELECT id, text, sender_id, timestamp_ms, language, tone FROM messages
                WHERE conversation_id = ?
                ORDER BY timestamp_ms DESC
                LIMIT ?
                """,
                (conversation_id, limit),
            )
            rows = await cursor.fetchall()
            return [ConversationMessage(**dict(row)) for row in rows]
        finally:
            await db.close()
