"""Expiring smart-reply cache over a keyed record store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from smartreply.clock import now_ms
from smartreply.models import record_key

if TYPE_CHECKING:
    from smartreply.clock import Clock
    from smartreply.models import SmartReplyRecord
    from smartreply.stores.base import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_EXPIRATION_MS = 300_000


class SmartReplyCache:
    """Reads ignore stale records; writes always overwrite.

    There is no eviction. A stale record stays in the store until the next
    successful write for the same key replaces it.
    """

    def __init__(
        self,
        store: RecordStore,
        expiration_ms: int = DEFAULT_EXPIRATION_MS,
        clock: Clock = now_ms,
    ) -> None:
        self._store = store
        self._expiration_ms = expiration_ms
        self._clock = clock

    @staticmethod
    def key(conversation_id: str, user_id: str) -> str:
        return record_key(conversation_id, user_id)

    async def get(self, key: str) -> SmartReplyRecord | None:
        return await self._store.get(key)

    async def put(self, key: str, record: SmartReplyRecord) -> None:
        await self._store.set(key, record)

    def is_expired(self, record: SmartReplyRecord) -> bool:
        expires_at = record.expires_at
        if expires_at is None:
            expires_at = record.generated_at + self._expiration_ms
        return self._clock() > expires_at

    async def get_fresh(self, conversation_id: str, user_id: str) -> SmartReplyRecord | None:
        """Return the cached record for the pair unless it is missing or stale."""
        record = await self.get(self.key(conversation_id, user_id))
        if record is None:
            return None
        if self.is_expired(record):
            logger.debug("Cached replies for %s are stale", record.id)
            return None
        logger.info(
            "Cache hit for %s (age %ds)",
            record.id,
            (self._clock() - record.generated_at) // 1000,
        )
        return record
