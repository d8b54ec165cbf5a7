"""Keyword heuristics for topics, sentiment, tone and language.

This is the degradation path for the AI analyzer: it has no failure mode
and always produces a (possibly empty) ContextSummary.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from smartreply.analysis.entities import extract_entities
from smartreply.analysis.scoring import score_messages
from smartreply.models import AnalysisBundle, ContextSummary

if TYPE_CHECKING:
    from smartreply.clock import Clock
    from smartreply.models import ConversationMessage, ConversationSettings, DetectedTone, Sentiment

logger = logging.getLogger(__name__)

TOPIC_KEYWORDS: tuple[str, ...] = (
    "work", "project", "meeting", "deadline", "budget",
    "family", "friends", "weekend", "vacation", "travel",
    "food", "restaurant", "cooking", "recipe",
    "health", "exercise", "doctor", "medicine",
    "shopping", "buy", "purchase", "price",
    "weather", "rain", "sunny", "cold", "hot",
)

POSITIVE_WORDS: tuple[str, ...] = (
    "good", "great", "awesome", "excellent", "amazing",
    "wonderful", "love", "like", "happy", "excited",
)

NEGATIVE_WORDS: tuple[str, ...] = (
    "bad", "terrible", "awful", "hate", "angry",
    "sad", "disappointed", "frustrated", "worried", "concerned",
)

FORMAL_CUES: tuple[str, ...] = ("please", "thank you", "sincerely")
CASUAL_CUES: tuple[str, ...] = ("hey", "lol", "haha", "omg")

_EMOJI_RE = re.compile(
    "[\U0001F600-\U0001F64F\U0001F300-\U0001F5FF\U0001F680-\U0001F6FF\U0001F1E0-\U0001F1FF]"
)

# Insertion order is the tie-break order: the first language to reach the
# highest count wins.
_STOP_WORDS: dict[str, re.Pattern[str]] = {
    "en": re.compile(r"\b(?:the|and|or|but|in|on|at|to|for|of|with|by)\b", re.IGNORECASE),
    "es": re.compile(r"\b(?:el|la|los|las|y|o|pero|en|con|por|para|de)\b", re.IGNORECASE),
    "fr": re.compile(r"\b(?:le|la|les|et|ou|mais|dans|avec|pour|de|du|des)\b", re.IGNORECASE),
    "de": re.compile(r"\b(?:der|die|das|und|oder|aber|in|mit|für|von|zu)\b", re.IGNORECASE),
}

DEFAULT_LANGUAGE = "en"


def extract_topics(text: str) -> list[str]:
    """Return the topic keywords that occur anywhere in *text*."""
    lower = text.lower()
    return [kw for kw in TOPIC_KEYWORDS if kw in lower]


def analyze_sentiment(text: str) -> Sentiment:
    lower = text.lower()
    positive = sum(1 for w in POSITIVE_WORDS if w in lower)
    negative = sum(1 for w in NEGATIVE_WORDS if w in lower)
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def determine_conversation_tone(messages: list[ConversationMessage]) -> DetectedTone:
    """Count politeness vs. slang/emoji messages; ties are neutral."""
    formal = 0
    casual = 0
    for message in messages:
        lower = message.text.lower()
        if any(cue in lower for cue in FORMAL_CUES):
            formal += 1
        if any(cue in lower for cue in CASUAL_CUES):
            casual += 1
        if _EMOJI_RE.search(message.text):
            casual += 1

    if formal > casual:
        return "formal"
    if casual > formal:
        return "casual"
    return "neutral"


def detect_language(text: str) -> str:
    """Pick the language whose stop words match most often. Defaults to English."""
    best = DEFAULT_LANGUAGE
    best_count = 0
    for lang, pattern in _STOP_WORDS.items():
        count = len(pattern.findall(text))
        if count > best_count:
            best_count = count
            best = lang
    return best


def analyze_context(messages: list[ConversationMessage]) -> ContextSummary:
    """Summarise a message batch without any external calls."""
    if not messages:
        return ContextSummary()

    all_text = " ".join(m.text for m in messages)
    return ContextSummary(
        topics=extract_topics(all_text),
        sentiment=analyze_sentiment(all_text),
        key_entities=extract_entities(all_text).entities,
        conversation_tone=determine_conversation_tone(messages),
        language=detect_language(all_text),
        message_count=len(messages),
    )


class HeuristicContextAnalyzer:
    """Deterministic analyzer producing the same bundle shape as the AI path."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock

    def analyze_sync(self, messages: list[ConversationMessage]) -> AnalysisBundle:
        now = self._clock() if self._clock else None
        all_text = " ".join(m.text for m in messages)
        return AnalysisBundle(
            context_analysis=analyze_context(messages),
            relevance_scores=score_messages(messages, now),
            entity_recognition=extract_entities(all_text),
        )

    async def analyze(
        self,
        messages: list[ConversationMessage],
        settings: ConversationSettings,
    ) -> AnalysisBundle:
        bundle = self.analyze_sync(messages)
        logger.debug(
            "Heuristic analysis for %s: %d topics, tone=%s, lang=%s",
            settings.id,
            len(bundle.context_analysis.topics),
            bundle.context_analysis.conversation_tone,
            bundle.context_analysis.language,
        )
        return bundle
