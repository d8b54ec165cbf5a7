"""SettingsStore: per-user conversation settings plus update helpers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from smartreply.clock import now_ms
from smartreply.errors import SettingsValidationError
from smartreply.models import TONE_PREFERENCES, ConversationSettings, record_key
from smartreply.stores.sqlite import SqliteStore

if TYPE_CHECKING:
    from pathlib import Path

    from smartreply.clock import Clock

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("tone_preference", "auto_translate", "smart_replies_enabled")


def validate_settings_update(changes: dict[str, Any]) -> list[str]:
    """Return a list of problems with *changes*; empty means valid."""
    errors: list[str] = []
    for name, value in changes.items():
        if name not in _UPDATABLE_FIELDS:
            errors.append(f"Unknown setting: {name}")
        elif name == "tone_preference":
            if value not in TONE_PREFERENCES:
                errors.append(
                    f"Invalid tone preference: {value!r} "
                    f"(expected one of {', '.join(TONE_PREFERENCES)})"
                )
        elif not isinstance(value, bool):
            errors.append(f"{name} must be a boolean")
    return errors


def requires_regeneration(before: ConversationSettings, after: ConversationSettings) -> bool:
    """Only tone and the enabled flag affect generated replies."""
    return (
        before.tone_preference != after.tone_preference
        or before.smart_replies_enabled != after.smart_replies_enabled
    )


def settings_summary(settings: ConversationSettings) -> str:
    """One-line human readable description of *settings*."""
    return " | ".join(
        [
            f"Tone: {settings.tone_preference}",
            f"Auto-translate: {'on' if settings.auto_translate else 'off'}",
            f"Smart replies: {'on' if settings.smart_replies_enabled else 'off'}",
        ]
    )


class SettingsStore(SqliteStore):
    """Conversation settings keyed ``conversationId_userId``."""

    _CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS conversation_settings (
        id TEXT PRIMARY KEY,
        conversation_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        tone_preference TEXT NOT NULL DEFAULT 'auto',
        auto_translate INTEGER NOT NULL DEFAULT 0,
        smart_replies_enabled INTEGER NOT NULL DEFAULT 1,
        updated_at INTEGER NOT NULL
    )
    """

    def __init__(self, db_path: Path | None = None, clock: Clock = now_ms) -> None:
        super().__init__(db_path)
        self._clock = clock

    async def get(self, conversation_id: str, user_id: str) -> ConversationSettings | None:
        db = await self._connect()
        try:
            cursor = await db.execute(
                "SELECT * FROM conversation_settings WHERE id = ?",
                (record_key(conversation_id, user_id),),
            )
            row = await cursor.fetchone()
            return ConversationSettings(**dict(row)) if row else None
        finally:
            await db.close()

    async def get_or_create(self, conversation_id: str, user_id: str) -> ConversationSettings:
        """Fetch settings, inserting the defaults if none exist yet."""
        existing = await self.get(conversation_id, user_id)
        if existing is not None:
            return existing

        defaults = ConversationSettings(
            id=record_key(conversation_id, user_id),
            conversation_id=conversation_id,
            user_id=user_id,
            updated_at=self._clock(),
        )
        db = await self._connect()
        try:
            # A concurrent creator may have won; keep whichever row landed first.
            await db.execute(
                """
                INSERT OR IGNORE INTO conversation_settings
                    (id, conversation_id, user_id, tone_preference,
                     auto_translate, smart_replies_enabled, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                _to_row(defaults),
            )
            await db.commit()
        finally:
            await db.close()

        logger.info("Created default settings for %s", defaults.id)
        stored = await self.get(conversation_id, user_id)
        return stored or defaults

    async def set(self, settings: ConversationSettings) -> ConversationSettings:
        """Overwrite the stored row, stamping ``updated_at``."""
        stamped = settings.model_copy(update={"updated_at": self._clock()})
        db = await self._connect()
        try:
            await db.execute(
                """
                INSERT OR REPLACE INTO conversation_settings
                    (id, conversation_id, user_id, tone_preference,
                     auto_translate, smart_replies_enabled, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                _to_row(stamped),
            )
            await db.commit()
            return stamped
        finally:
            await db.close()

    async def update(
        self, conversation_id: str, user_id: str, **changes: Any
    ) -> tuple[ConversationSettings, ConversationSettings]:
        """Apply *changes* and return ``(before, after)``.

        Raises:
            SettingsValidationError: if any change is unknown or ill-typed.
        """
        errors = validate_settings_update(changes)
        if errors:
            raise SettingsValidationError(errors)

        before = await self.get_or_create(conversation_id, user_id)
        after = await self.set(before.model_copy(update=changes))
        logger.info("Updated settings for %s: %s", after.id, settings_summary(after))
        return before, after


def _to_row(s: ConversationSettings) -> tuple:
    return (
        s.id,
        s.conversation_id,
        s.user_id,
        s.tone_preference,
        int(s.auto_translate),
        int(s.smart_replies_enabled),
        s.updated_at,
    )
