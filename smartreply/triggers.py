"""Event handlers that decide when to (re)generate smart replies."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from smartreply.models import ContextAnalysisSnapshot, GenerationOptions
from smartreply.stores.settings import requires_regeneration

if TYPE_CHECKING:
    from smartreply.coordinator import GenerationCoordinator
    from smartreply.models import ConversationMessage, ConversationSettings, GenerationOutcome
    from smartreply.stores.conversations import ConversationStore

logger = logging.getLogger(__name__)


class RefreshResult(BaseModel):
    """Response of a manual refresh request."""

    success: bool
    message: str
    replies: list[str] = Field(default_factory=list)
    context_analysis: ContextAnalysisSnapshot | None = None
    error: str | None = None


class SmartReplyTriggers:
    """Maps conversation events onto coordinator calls.

    Every trigger forces a refresh, so records written here are tagged
    ``manual``.
    """

    def __init__(
        self,
        coordinator: GenerationCoordinator,
        conversations: ConversationStore,
    ) -> None:
        self._coordinator = coordinator
        self._conversations = conversations

    async def on_message_created(
        self, conversation_id: str, message: ConversationMessage
    ) -> dict[str, GenerationOutcome | None]:
        """Regenerate for every participant, the sender included."""
        participants = await self._conversations.get_participants(conversation_id)
        if not participants:
            logger.info("No participants in %s, skipping smart replies", conversation_id)
            return {}

        async def _one(user_id: str) -> GenerationOutcome | None:
            try:
                language = await self._conversations.get_target_language(conversation_id, user_id)
                return await self._coordinator.generate_smart_replies(
                    conversation_id,
                    user_id,
                    GenerationOptions(
                        force_refresh=True,
                        sender_id=message.sender_id,
                        target_language=language,
                    ),
                )
            except Exception:
                logger.exception("Smart replies failed for %s in %s", user_id, conversation_id)
                return None

        outcomes = await asyncio.gather(*(_one(p) for p in participants))
        results = dict(zip(participants, outcomes, strict=True))
        succeeded = sum(1 for o in outcomes if o is not None and o.success)
        logger.info(
            "Message %s: smart replies for %d/%d participants",
            message.id,
            succeeded,
            len(participants),
        )
        return results

    async def on_settings_updated(
        self, before: ConversationSettings, after: ConversationSettings
    ) -> GenerationOutcome | None:
        """Regenerate only when tone or the enabled flag changed."""
        if not requires_regeneration(before, after):
            logger.info("Settings change for %s does not affect replies", after.id)
            return None
        return await self._coordinator.generate_smart_replies(
            after.conversation_id,
            after.user_id,
            GenerationOptions(force_refresh=True),
        )

    async def on_participants_changed(
        self, conversation_id: str, before: list[str], after: list[str]
    ) -> dict[str, GenerationOutcome | None]:
        """Generate for newly added participants only."""
        existing = set(before)
        added = [p for p in after if p not in existing]
        if not added:
            logger.info("No new participants in %s", conversation_id)
            return {}

        async def _one(user_id: str) -> GenerationOutcome | None:
            try:
                return await self._coordinator.generate_smart_replies(
                    conversation_id, user_id, GenerationOptions(force_refresh=True)
                )
            except Exception:
                logger.exception("Smart replies failed for %s in %s", user_id, conversation_id)
                return None

        outcomes = await asyncio.gather(*(_one(p) for p in added))
        return dict(zip(added, outcomes, strict=True))

    async def refresh(self, conversation_id: str, user_id: str) -> RefreshResult:
        """Manual refresh requested by a user."""
        if not conversation_id or not user_id:
            error = "conversation_id and user_id are required"
            return RefreshResult(
                success=False, message=f"Failed to refresh smart replies: {error}", error=error
            )

        logger.info("Manual refresh requested for %s/%s", conversation_id, user_id)
        outcome = await self._coordinator.generate_smart_replies(
            conversation_id, user_id, GenerationOptions(force_refresh=True)
        )
        if outcome.success and outcome.smart_replies is not None:
            return RefreshResult(
                success=True,
                message="Smart replies refreshed successfully",
                replies=outcome.smart_replies.replies,
                context_analysis=outcome.smart_replies.context_analysis,
            )

        error = outcome.error or "Smart replies generation failed"
        logger.error("Manual refresh failed for %s/%s: %s", conversation_id, user_id, error)
        return RefreshResult(
            success=False, message=f"Failed to refresh smart replies: {error}", error=error
        )
