"""Top-level entry point: settings, cache, retrieval, pipeline, persistence.

The whole sequence runs inside a bounded retry loop, so a failure anywhere
(including the settings lookup) repeats the cache check on the next attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from smartreply.clock import now_ms
from smartreply.errors import SmartReplyError
from smartreply.models import (
    ContextAnalysisSnapshot,
    GenerationOptions,
    GenerationOutcome,
    SmartReplyRecord,
    record_key,
)
from smartreply.pipeline.postprocess import greeting_replies

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from smartreply.cache import SmartReplyCache
    from smartreply.clock import Clock
    from smartreply.models import ConversationSettings, GeneratedBy
    from smartreply.pipeline.orchestrator import PipelineOrchestrator
    from smartreply.stores.base import MessageSource, SettingsSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3


def backoff_delay_ms(attempt: int) -> int:
    """Delay after failed *attempt* (1-based): 2s, 4s, 8s, ..."""
    return 2**attempt * 1000


class GenerationCoordinator:
    """Generates and caches smart replies for one (conversation, user) pair.

    Args:
        settings_store: Source of conversation settings.
        messages: Source of recent conversation messages.
        cache: Expiring reply cache.
        orchestrator: Pipeline that produces new records.
        max_retries: Default attempt count when the caller gives none.
        sleep: Awaitable sleep taking seconds. Injected in tests.
        clock: Millisecond clock.
    """

    def __init__(
        self,
        settings_store: SettingsSource,
        messages: MessageSource,
        cache: SmartReplyCache,
        orchestrator: PipelineOrchestrator,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Clock = now_ms,
    ) -> None:
        self._settings_store = settings_store
        self._messages = messages
        self._cache = cache
        self._orchestrator = orchestrator
        self._max_retries = max_retries
        self._sleep = sleep
        self._clock = clock

    async def generate_smart_replies(
        self,
        conversation_id: str,
        user_id: str,
        options: GenerationOptions | None = None,
    ) -> GenerationOutcome:
        """Return cached or freshly generated replies. Never raises."""
        options = options or GenerationOptions()
        max_retries = options.max_retries if options.max_retries is not None else self._max_retries
        max_retries = max(1, max_retries)
        started = self._clock()
        last_error = "Unknown error"

        for attempt in range(1, max_retries + 1):
            try:
                logger.info(
                    "Generating smart replies for %s/%s (attempt %d/%d, sender: %s)",
                    conversation_id,
                    user_id,
                    attempt,
                    max_retries,
                    options.sender_id,
                )
                return await self._attempt(conversation_id, user_id, options, started)
            except Exception as exc:
                last_error = str(exc) or type(exc).__name__
                logger.warning(
                    "Attempt %d/%d failed for %s/%s: %s",
                    attempt,
                    max_retries,
                    conversation_id,
                    user_id,
                    last_error,
                )
                if attempt < max_retries:
                    delay = backoff_delay_ms(attempt)
                    logger.info("Retrying in %dms", delay)
                    await self._sleep(delay / 1000)

        logger.error(
            "Smart reply generation failed for %s/%s after %d attempts: %s",
            conversation_id,
            user_id,
            max_retries,
            last_error,
        )
        return GenerationOutcome(
            success=False,
            processing_time_ms=self._clock() - started,
            error=last_error,
        )

    async def _attempt(
        self,
        conversation_id: str,
        user_id: str,
        options: GenerationOptions,
        started: int,
    ) -> GenerationOutcome:
        settings = await self._settings_store.get_or_create(conversation_id, user_id)
        if not settings.smart_replies_enabled:
            logger.info("Smart replies disabled for %s", settings.id)
            return GenerationOutcome(success=True, processing_time_ms=self._clock() - started)

        if not options.force_refresh:
            cached = await self._cache.get_fresh(conversation_id, user_id)
            if cached is not None:
                return GenerationOutcome(
                    success=True,
                    smart_replies=cached,
                    processing_time_ms=self._clock() - started,
                    cache_hit=True,
                )

        generated_by: GeneratedBy = "manual" if options.force_refresh else "auto"
        limit = self._orchestrator.config.max_messages
        messages = await self._messages.get_recent_messages(conversation_id, limit)

        if not messages:
            record = self._greeting_record(conversation_id, user_id, settings, generated_by)
            logger.info("No messages in %s, storing greeting replies", conversation_id)
        else:
            result = await self._orchestrator.run(
                conversation_id, user_id, messages, settings, options.target_language
            )
            if not result.success:
                raise SmartReplyError(result.error or "pipeline failed")
            record = result.smart_replies.model_copy(update={"generated_by": generated_by})

        await self._cache.put(record.id, record)
        return GenerationOutcome(
            success=True,
            smart_replies=record,
            processing_time_ms=self._clock() - started,
        )

    def _greeting_record(
        self,
        conversation_id: str,
        user_id: str,
        settings: ConversationSettings,
        generated_by: GeneratedBy,
    ) -> SmartReplyRecord:
        now = self._clock()
        return SmartReplyRecord(
            id=record_key(conversation_id, user_id),
            conversation_id=conversation_id,
            user_id=user_id,
            replies=greeting_replies(settings),
            context_analysis=ContextAnalysisSnapshot(
                tone=settings.tone_preference,
                analyzed_at=now,
            ),
            generated_at=now,
            expires_at=now + self._orchestrator.config.cache_expiration_ms,
            generated_by=generated_by,
        )
