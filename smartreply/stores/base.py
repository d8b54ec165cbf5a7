"""Protocols for the collaborators the pipeline consumes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from smartreply.llm.client import Completion
    from smartreply.models import (
        AnalysisBundle,
        ConversationMessage,
        ConversationSettings,
        SmartReplyRecord,
    )


@runtime_checkable
class MessageSource(Protocol):
    """Read access to stored conversation messages."""

    async def get_recent_messages(
        self, conversation_id: str, limit: int = 30
    ) -> list[ConversationMessage]:
        """Return up to *limit* messages, newest first."""
        ...


@runtime_checkable
class SettingsSource(Protocol):
    """Per-user conversation settings, created with defaults on first access."""

    async def get_or_create(self, conversation_id: str, user_id: str) -> ConversationSettings:
        ...


@runtime_checkable
class RecordStore(Protocol):
    """Keyed document store for cached smart replies."""

    async def get(self, key: str) -> SmartReplyRecord | None:
        ...

    async def set(self, key: str, record: SmartReplyRecord) -> None:
        """Unconditionally overwrite *key*."""
        ...


@runtime_checkable
class CompletionService(Protocol):
    """Text completion backend used by reply generation and AI analysis."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> Completion:
        ...


@runtime_checkable
class ContextAnalyzer(Protocol):
    """Produces topics/sentiment/tone/entities and per-message scores."""

    async def analyze(
        self,
        messages: list[ConversationMessage],
        settings: ConversationSettings,
    ) -> AnalysisBundle:
        ...
