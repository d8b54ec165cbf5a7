"""Per-message relevance scoring."""

import math

from smartreply.clock import now_ms
from smartreply.models import ConversationMessage, RelevanceFactors, RelevanceScore

MS_PER_HOUR = 3_600_000
RECENCY_HALF_LIFE_HOURS = 24

RECENCY_WEIGHT = 0.4
ENGAGEMENT_WEIGHT = 0.3
IMPORTANCE_WEIGHT = 0.3

QUESTION_IMPORTANCE = 1.2
BASE_IMPORTANCE = 1.0


def calculate_relevance_score(
    message: ConversationMessage,
    current_time_ms: int | None = None,
) -> RelevanceScore:
    """Score a message by recency, length and whether it asks a question.

    ``score = 0.4 * recency + 0.3 * engagement + 0.3 * importance`` where
    recency decays as ``exp(-age_hours / 24)``, engagement is the text length
    over 100 capped at 1, and importance is 1.2 for questions, else 1.0.
    """
    now = now_ms() if current_time_ms is None else current_time_ms
    age_hours = (now - message.timestamp_ms) / MS_PER_HOUR

    recency = math.exp(-age_hours / RECENCY_HALF_LIFE_HOURS)
    engagement = min(len(message.text) / 100, 1)
    importance = QUESTION_IMPORTANCE if "?" in message.text else BASE_IMPORTANCE

    score = (
        recency * RECENCY_WEIGHT
        + engagement * ENGAGEMENT_WEIGHT
        + importance * IMPORTANCE_WEIGHT
    )
    return RelevanceScore(
        message_id=message.id,
        score=score,
        factors=RelevanceFactors(
            recency=recency,
            engagement=engagement,
            importance=importance,
        ),
    )


def score_messages(
    messages: list[ConversationMessage],
    current_time_ms: int | None = None,
) -> list[RelevanceScore]:
    """Score every message against the same reference time."""
    now = now_ms() if current_time_ms is None else current_time_ms
    return [calculate_relevance_score(m, now) for m in messages]
