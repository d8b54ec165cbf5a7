"""AI-backed context analysis.

One completion call analyses the whole batch and returns topics, sentiment,
entities, language, tone and per-message relevance. Any failure (transport
error, non-JSON output, wrong shape) surfaces as ``AnalysisError`` so the
orchestrator can swap in the heuristic analyzer wholesale.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field, ValidationError

from smartreply.analysis.entities import categorize_entities
from smartreply.errors import AnalysisError
from smartreply.models import (
    AnalysisBundle,
    ContextSummary,
    EntityRecognition,
    RelevanceFactors,
    RelevanceScore,
)

if TYPE_CHECKING:
    from smartreply.models import ConversationMessage, ConversationSettings
    from smartreply.stores.base import CompletionService

logger = logging.getLogger(__name__)

MAX_ANALYSIS_MESSAGES = 30
ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_TOKENS = 1000

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")

ANALYSIS_SYSTEM_PROMPT = """You are a conversation analysis engine.

Analyze the conversation you are given and return a JSON object with exactly
this structure:
{
  "topics": ["topic1", "topic2"],
  "sentiment": "positive|neutral|negative",
  "entities": ["entity1", "entity2"],
  "language": "ISO 639-1 code of the primary language",
  "tone": "formal|casual|auto",
  "relevanceScores": [
    {"messageId": "message id", "score": 0.85, "reason": "short explanation"}
  ]
}

Score every message between 0 and 1. Return JSON only, no Markdown."""


class _ScoredMessage(BaseModel):
    messageId: str
    score: float = Field(ge=0.0, le=1.0)
    reason: str = ""


class _AnalysisPayload(BaseModel):
    topics: list[str] = Field(default_factory=list)
    sentiment: Literal["positive", "neutral", "negative"] = "neutral"
    entities: list[str] = Field(default_factory=list)
    language: str | None = None
    tone: Literal["formal", "casual", "auto"] | None = None
    relevanceScores: list[_ScoredMessage] = Field(default_factory=list)


def build_analysis_prompt(
    messages: list[ConversationMessage],
    settings: ConversationSettings,
) -> str:
    """Render the batch oldest-first, labelling the requesting user's lines."""
    ordered = sorted(messages, key=lambda m: m.timestamp_ms)
    lines = [
        f"[{m.id}] {'User' if m.sender_id == settings.user_id else 'Other'}: {m.text}"
        for m in ordered
    ]
    return (
        "<conversation>\n"
        + "\n".join(lines)
        + "\n</conversation>\n\n"
        + "<preferences>\n"
        + f"Tone preference: {settings.tone_preference}\n"
        + f"Auto-translate: {str(settings.auto_translate).lower()}\n"
        + "</preferences>\n\n"
        + "Analyze this conversation. Return JSON only."
    )


def parse_analysis_result(text: str) -> _AnalysisPayload:
    """Strictly parse the analysis JSON. Raises AnalysisError on any mismatch."""
    cleaned = _FENCE_RE.sub("", text.strip())
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        msg = f"analysis response is not JSON: {exc}"
        raise AnalysisError(msg) from exc
    try:
        return _AnalysisPayload.model_validate(data)
    except ValidationError as exc:
        msg = f"analysis response has the wrong shape: {exc.error_count()} error(s)"
        raise AnalysisError(msg) from exc


class AIContextAnalyzer:
    """Delegates context analysis to a completion model.

    Args:
        completion: Completion backend.
        model: Model ID for the analysis call.
    """

    def __init__(self, completion: CompletionService, model: str) -> None:
        self._completion = completion
        self._model = model

    async def analyze(
        self,
        messages: list[ConversationMessage],
        settings: ConversationSettings,
    ) -> AnalysisBundle:
        batch = messages[:MAX_ANALYSIS_MESSAGES]
        logger.info("Starting AI analysis for %d messages (%s)", len(batch), settings.id)

        try:
            completion = await self._completion.complete(
                ANALYSIS_SYSTEM_PROMPT,
                build_analysis_prompt(batch, settings),
                model=self._model,
                temperature=ANALYSIS_TEMPERATURE,
                max_tokens=ANALYSIS_MAX_TOKENS,
            )
        except Exception as exc:
            msg = f"analysis call failed: {exc}"
            raise AnalysisError(msg) from exc

        payload = parse_analysis_result(completion.text)
        return self._to_bundle(payload, batch, settings)

    @staticmethod
    def _to_bundle(
        payload: _AnalysisPayload,
        messages: list[ConversationMessage],
        settings: ConversationSettings,
    ) -> AnalysisBundle:
        tone = payload.tone or settings.tone_preference
        context = ContextSummary(
            topics=payload.topics,
            sentiment=payload.sentiment,
            key_entities=payload.entities,
            conversation_tone="neutral" if tone == "auto" else tone,
            language=payload.language or "en",
            message_count=len(messages),
        )
        # The model returns a single score; split it using the heuristic weights.
        scores = [
            RelevanceScore(
                message_id=s.messageId,
                score=s.score,
                factors=RelevanceFactors(
                    recency=s.score * 0.4,
                    engagement=s.score * 0.3,
                    importance=s.score * 0.3,
                ),
            )
            for s in payload.relevanceScores
        ]
        entities = EntityRecognition(
            entities=payload.entities,
            categories=categorize_entities(payload.entities),
        )
        return AnalysisBundle(
            context_analysis=context,
            relevance_scores=scores,
            entity_recognition=entities,
        )
