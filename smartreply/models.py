"""Data models for messages, settings, analysis results and cached replies."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Sentiment = Literal["positive", "neutral", "negative"]
DetectedTone = Literal["formal", "casual", "neutral"]
TonePreference = Literal["formal", "casual", "auto"]
GeneratedBy = Literal["auto", "manual"]

TONE_PREFERENCES: tuple[str, ...] = ("formal", "casual", "auto")


def record_key(conversation_id: str, user_id: str) -> str:
    """Key shared by settings and cached replies: ``conversationId_userId``."""
    return f"{conversation_id}_{user_id}"


# -- Messages ----------------------------------------------------------------


class ConversationMessage(BaseModel):
    """A message retrieved from the message store. Read-only to this package."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    sender_id: str
    timestamp_ms: int
    language: str = "en"
    tone: DetectedTone = "neutral"


# -- Analysis ----------------------------------------------------------------


class RelevanceFactors(BaseModel):
    recency: float
    engagement: float
    importance: float


class RelevanceScore(BaseModel):
    """Weighted importance of a single message."""

    message_id: str
    score: float
    factors: RelevanceFactors


class EntityCategories(BaseModel):
    people: list[str] = Field(default_factory=list)
    places: list[str] = Field(default_factory=list)
    organizations: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    dates: list[str] = Field(default_factory=list)


class EntityRecognition(BaseModel):
    """Flat entity list plus the same entities bucketed by kind."""

    entities: list[str] = Field(default_factory=list)
    categories: EntityCategories = Field(default_factory=EntityCategories)


class ContextSummary(BaseModel):
    """Topics, sentiment, tone and language derived from a message batch."""

    topics: list[str] = Field(default_factory=list)
    sentiment: Sentiment = "neutral"
    key_entities: list[str] = Field(default_factory=list)
    conversation_tone: DetectedTone = "neutral"
    language: str = "en"
    message_count: int = 0


class AnalysisBundle(BaseModel):
    """Output of the parallel-analysis stage, identical for AI and heuristic paths."""

    context_analysis: ContextSummary
    relevance_scores: list[RelevanceScore] = Field(default_factory=list)
    entity_recognition: EntityRecognition = Field(default_factory=EntityRecognition)


# -- Settings ----------------------------------------------------------------


class ConversationSettings(BaseModel):
    """Per-user, per-conversation smart-reply preferences."""

    id: str
    conversation_id: str
    user_id: str
    tone_preference: TonePreference = "auto"
    auto_translate: bool = False
    smart_replies_enabled: bool = True
    updated_at: int = 0


# -- Pipeline ----------------------------------------------------------------


class PipelineStepRecord(BaseModel):
    """Timing and outcome of one pipeline stage. Diagnostic only."""

    name: str
    start_time: int
    end_time: int | None = None
    duration_ms: int = 0
    success: bool = False
    error: str | None = None


class GenerationResult(BaseModel):
    """Candidate replies from the completion service plus call metadata."""

    replies: list[str]
    model: str
    tokens_used: int = 0
    temperature: float
    max_tokens: int
    fallback_used: bool = False


class ContextAnalysisSnapshot(BaseModel):
    """The context summary as stored alongside cached replies."""

    topics: list[str] = Field(default_factory=list)
    sentiment: Sentiment = "neutral"
    entities: list[str] = Field(default_factory=list)
    language: str = "en"
    tone: TonePreference = "auto"
    message_count: int = 0
    analyzed_at: int = 0


class SmartReplyRecord(BaseModel):
    """Cached reply suggestions for one (conversation, user) pair."""

    id: str
    conversation_id: str
    user_id: str
    replies: list[str] = Field(default_factory=list)
    context_analysis: ContextAnalysisSnapshot = Field(default_factory=ContextAnalysisSnapshot)
    generated_at: int
    expires_at: int | None = None
    generated_by: GeneratedBy = "auto"
    pipeline_steps: list[PipelineStepRecord] = Field(default_factory=list)


class PipelineResult(BaseModel):
    """Outcome of one orchestrator run.

    On failure ``smart_replies`` is an empty placeholder that must never be
    persisted.
    """

    success: bool
    smart_replies: SmartReplyRecord
    pipeline_steps: list[PipelineStepRecord] = Field(default_factory=list)
    total_duration_ms: int = 0
    error: str | None = None


class GenerationOptions(BaseModel):
    """Caller options for ``GenerationCoordinator.generate_smart_replies``."""

    force_refresh: bool = False
    max_retries: int | None = None
    sender_id: str | None = None
    target_language: str | None = None


class GenerationOutcome(BaseModel):
    """What the public entry point returns to callers."""

    success: bool
    smart_replies: SmartReplyRecord | None = None
    processing_time_ms: int = 0
    cache_hit: bool = False
    error: str | None = None


class PerformanceMetrics(BaseModel):
    total_duration_ms: int
    step_durations: dict[str, int]
    parallel_execution_savings: int = 0
    cache_hit_rate: float = 0.0
    error_rate: float = 0.0
