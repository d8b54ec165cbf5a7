"""Reply prompt assembly."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from smartreply.clock import ms_to_iso

if TYPE_CHECKING:
    from smartreply.models import (
        ContextSummary,
        ConversationMessage,
        ConversationSettings,
        DetectedTone,
        TonePreference,
    )

logger = logging.getLogger(__name__)

REPLY_SYSTEM_PROMPT = (
    "You are a helpful messaging assistant. Generate exactly 3 diverse, "
    "contextually relevant reply suggestions based on the conversation context. "
    "Return only a JSON array of strings."
)


def effective_tone(
    preference: TonePreference, detected: DetectedTone
) -> Literal["formal", "casual"]:
    """Resolve ``auto`` against the detected tone; explicit preferences win."""
    if preference == "auto":
        return "formal" if detected == "formal" else "casual"
    return preference


def format_messages_for_context(
    messages: list[ConversationMessage],
    max_length: int = 4000,
) -> str:
    """Render messages oldest-first as ``[ISO8601] text`` lines.

    Stops at the first message that would push the total past *max_length*
    characters; later messages are dropped even if they are short.
    """
    lines: list[str] = []
    length = 0
    for message in sorted(messages, key=lambda m: m.timestamp_ms):
        line = f"[{ms_to_iso(message.timestamp_ms)}] {message.text}\n"
        if length + len(line) > max_length:
            break
        lines.append(line)
        length += len(line)
    return "".join(lines).strip()


class PromptAugmenter:
    """Builds the single user prompt sent to the reply model."""

    def __init__(self, context_window_size: int = 4000) -> None:
        self._context_window_size = context_window_size

    def build(
        self,
        messages: list[ConversationMessage],
        context: ContextSummary,
        settings: ConversationSettings,
        target_language: str | None = None,
    ) -> str:
        transcript = format_messages_for_context(messages, self._context_window_size)
        tone = effective_tone(settings.tone_preference, context.conversation_tone)
        language = target_language or context.language

        logger.info(
            "Building prompt (lang: %s, topics: %d, sentiment: %s)",
            language,
            len(context.topics),
            context.sentiment,
        )

        return f"""Generate 3 contextually relevant smart replies for a {tone} conversation.

Context:
{transcript}

Conversation Analysis:
- Topics: {", ".join(context.topics)}
- Sentiment: {context.sentiment}
- Key Entities: {", ".join(context.key_entities)}
- Language: {context.language}
- Tone: {tone}

User Preferences:
- Tone: {tone}
- Auto-translate: {str(settings.auto_translate).lower()}
- Target Language: {language}

Generate exactly 3 diverse, contextually relevant replies that:
1. Match the conversation tone ({tone})
2. Are appropriate for the current context
3. Are written EXCLUSIVELY in {language}
4. Are concise (under 100 characters) and actionable
5. Feel natural and conversational

IMPORTANT: All replies must be in {language}. Do not use any other language.

Format the output as a JSON array of exactly 3 strings."""
