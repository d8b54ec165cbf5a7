"""Reply clean-up and the tone-keyed canned reply sets."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from smartreply.models import ConversationSettings

MAX_REPLY_LENGTH = 100
REPLY_COUNT = 3

_FALLBACKS: dict[str, tuple[str, ...]] = {
    "formal": (
        "I understand. Thank you for the information.",
        "I'll review this and get back to you.",
        "That makes sense. Let me consider this further.",
    ),
    "casual": (
        "Sounds good!",
        "Got it, thanks!",
        "Cool, I'll check it out.",
    ),
    "neutral": (
        "Thanks for letting me know.",
        "I'll look into this.",
        "Appreciate the update.",
    ),
}

_GREETINGS: dict[str, tuple[str, ...]] = {
    "formal": (
        "Good day! How may I assist you?",
        "Hello, I hope you're doing well.",
        "Greetings! What brings you here today?",
    ),
    "casual": (
        "Hey there! 👋",
        "What's up?",
        "How's it going?",
    ),
    "neutral": (
        "Hello! 👋",
        "How are you doing?",
        "What's on your mind?",
    ),
}


def fallback_replies(settings: ConversationSettings) -> list[str]:
    """Padding replies for the user's tone preference; ``auto`` gets neutral."""
    return list(_FALLBACKS.get(settings.tone_preference, _FALLBACKS["neutral"]))


def greeting_replies(settings: ConversationSettings) -> list[str]:
    """Opening replies for an empty conversation; ``auto`` gets casual."""
    tone = "casual" if settings.tone_preference == "auto" else settings.tone_preference
    return list(_GREETINGS.get(tone, _GREETINGS["neutral"]))


def post_process_replies(candidates: list[str], settings: ConversationSettings) -> list[str]:
    """Return exactly 3 non-empty replies of at most 100 characters.

    Valid candidates keep their order; shortfalls are padded from the
    tone-keyed fallback list.
    """
    valid = [c.strip() for c in candidates if c.strip() and len(c.strip()) <= MAX_REPLY_LENGTH]
    if len(valid) >= REPLY_COUNT:
        return valid[:REPLY_COUNT]
    return (valid + fallback_replies(settings))[:REPLY_COUNT]
