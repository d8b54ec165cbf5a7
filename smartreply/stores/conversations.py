"""ConversationStore: participants and per-participant reply language."""

from __future__ import annotations

import json
import logging

from smartreply.stores.sqlite import SqliteStore

logger = logging.getLogger(__name__)

DEFAULT_TARGET_LANGUAGE = "en"


class ConversationStore(SqliteStore):
    """Conversation membership, consulted by the triggers."""

    _CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS conversations (
        id TEXT PRIMARY KEY,
        participants TEXT NOT NULL DEFAULT '[]',
        language_prefs TEXT NOT NULL DEFAULT '{}'
    )
    """

    async def _load(self, conversation_id: str) -> tuple[list[str], dict[str, str]]:
        db = await self._connect()
        try:
            cursor = await db.execute(
                "SELECT participants, language_prefs FROM conversations WHERE id = ?",
                (conversation_id,),
            )
            row = await cursor.fetchone()
        finally:
            await db.close()
        if row is None:
            return [], {}
        return json.loads(row["participants"]), json.loads(row["language_prefs"])

    async def _save(
        self, conversation_id: str, participants: list[str], prefs: dict[str, str]
    ) -> None:
        db = await self._connect()
        try:
            await db.execute(
                """
                INSERT OR REPLACE INTO conversations (id, participants, language_prefs)
                VALUES (?, ?, ?)
                """,
                (conversation_id, json.dumps(participants), json.dumps(prefs)),
            )
            await db.commit()
        finally:
            await db.close()

    async def get_participants(self, conversation_id: str) -> list[str]:
        participants, _ = await self._load(conversation_id)
        return participants

    async def set_participants(
        self, conversation_id: str, participants: list[str]
    ) -> tuple[list[str], list[str]]:
        """Replace the participant list. Returns ``(before, after)``."""
        before, prefs = await self._load(conversation_id)
        after = list(dict.fromkeys(participants))
        await self._save(conversation_id, after, prefs)
        logger.info("Conversation %s now has %d participants", conversation_id, len(after))
        return before, after

    async def get_target_language(self, conversation_id: str, user_id: str) -> str:
        """The participant's preferred reply language, ``en`` when unset."""
        _, prefs = await self._load(conversation_id)
        return prefs.get(user_id, DEFAULT_TARGET_LANGUAGE)

    async def set_target_language(self, conversation_id: str, user_id: str, language: str) -> None:
        participants, prefs = await self._load(conversation_id)
        prefs[user_id] = language
        await self._save(conversation_id, participants, prefs)
