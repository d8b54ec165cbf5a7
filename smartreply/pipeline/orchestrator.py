"""Staged smart-reply pipeline.

Stages run strictly in order and each one is timed into a
``PipelineStepRecord``. Analysis and generation degrade locally instead of
failing; any other exception aborts the run with ``success=False``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from smartreply.clock import now_ms
from smartreply.errors import PipelineStageError
from smartreply.models import (
    ContextAnalysisSnapshot,
    PipelineResult,
    SmartReplyRecord,
    record_key,
)
from smartreply.pipeline.generator import ReplyGenerator
from smartreply.pipeline.postprocess import post_process_replies
from smartreply.pipeline.prompt import PromptAugmenter
from smartreply.pipeline.steps import complete_step, start_step

if TYPE_CHECKING:
    from collections.abc import Iterator

    from smartreply.analysis.heuristic import HeuristicContextAnalyzer
    from smartreply.clock import Clock
    from smartreply.config import PipelineConfig
    from smartreply.models import (
        AnalysisBundle,
        ConversationMessage,
        ConversationSettings,
        PipelineStepRecord,
    )
    from smartreply.stores.base import CompletionService, ContextAnalyzer

logger = logging.getLogger(__name__)

STAGE_RETRIEVAL = "Retrieval"
STAGE_ANALYSIS = "Parallel Analysis"
STAGE_AUGMENTATION = "Augmentation"
STAGE_GENERATION = "Generation"
STAGE_POST_PROCESSING = "Post-Processing"
STAGE_PACKAGING = "Packaging"


class PipelineOrchestrator:
    """Runs retrieval, analysis, augmentation, generation, post-processing
    and packaging for one (conversation, user) pair.

    Args:
        config: Validated pipeline configuration.
        completion: Completion backend for reply generation.
        heuristic: Deterministic analyzer, used directly when *ai_analyzer*
            is None and as the substitute when it fails.
        ai_analyzer: Optional primary analyzer.
        clock: Millisecond clock.
    """

    def __init__(
        self,
        config: PipelineConfig,
        completion: CompletionService,
        heuristic: HeuristicContextAnalyzer,
        ai_analyzer: ContextAnalyzer | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self._config = config
        self._heuristic = heuristic
        self._ai_analyzer = ai_analyzer
        self._clock = clock
        self._augmenter = PromptAugmenter(config.context_window_size)
        self._generator = ReplyGenerator(completion, config)

    @property
    def config(self) -> PipelineConfig:
        return self._config

    async def run(
        self,
        conversation_id: str,
        user_id: str,
        messages: list[ConversationMessage],
        settings: ConversationSettings,
        target_language: str | None = None,
    ) -> PipelineResult:
        started = self._clock()
        steps: list[PipelineStepRecord] = []

        try:
            with self._timed(STAGE_RETRIEVAL, steps):
                recent = sorted(messages, key=lambda m: m.timestamp_ms, reverse=True)
                recent = recent[: self._config.max_messages]

            with self._timed(STAGE_ANALYSIS, steps):
                bundle = await self._analyze(recent, settings)

            with self._timed(STAGE_AUGMENTATION, steps):
                prompt = self._augmenter.build(
                    recent, bundle.context_analysis, settings, target_language
                )

            with self._timed(STAGE_GENERATION, steps):
                generation = await self._generator.generate(prompt)

            with self._timed(STAGE_POST_PROCESSING, steps):
                replies = post_process_replies(generation.replies, settings)

            with self._timed(STAGE_PACKAGING, steps):
                record = self._package(conversation_id, user_id, replies, bundle)
        except PipelineStageError as exc:
            total = self._clock() - started
            logger.exception("Pipeline failed for %s after %dms", conversation_id, total)
            return PipelineResult(
                success=False,
                smart_replies=self._placeholder(conversation_id, user_id),
                pipeline_steps=steps,
                total_duration_ms=total,
                error=str(exc),
            )

        total = self._clock() - started
        logger.info(
            "Pipeline completed for %s in %dms (fallback: %s)",
            conversation_id,
            total,
            generation.fallback_used,
        )
        return PipelineResult(
            success=True,
            smart_replies=record.model_copy(update={"pipeline_steps": steps}),
            pipeline_steps=steps,
            total_duration_ms=total,
        )

    @contextmanager
    def _timed(self, name: str, steps: list[PipelineStepRecord]) -> Iterator[None]:
        """Record the enclosed block as step *name*.

        Any exception inside the block is recorded on the step and re-raised as
        ``PipelineStageError`` carrying the stage name.
        """
        step = start_step(name, self._clock)
        try:
            yield
        except Exception as exc:
            error = PipelineStageError(name, str(exc))
            steps.append(complete_step(step, False, error=str(error), clock=self._clock))
            raise error from exc
        steps.append(complete_step(step, True, clock=self._clock))

    async def _analyze(
        self,
        messages: list[ConversationMessage],
        settings: ConversationSettings,
    ) -> AnalysisBundle:
        if self._ai_analyzer is None:
            return await self._heuristic.analyze(messages, settings)
        try:
            return await self._ai_analyzer.analyze(messages, settings)
        except Exception:
            logger.warning("AI analysis failed, falling back to heuristics", exc_info=True)
            return self._heuristic.analyze_sync(messages)

    def _package(
        self,
        conversation_id: str,
        user_id: str,
        replies: list[str],
        bundle: AnalysisBundle,
    ) -> SmartReplyRecord:
        now = self._clock()
        context = bundle.context_analysis
        tone = context.conversation_tone
        snapshot = ContextAnalysisSnapshot(
            topics=context.topics,
            sentiment=context.sentiment,
            entities=context.key_entities,
            language=context.language,
            tone="auto" if tone == "neutral" else tone,
            message_count=context.message_count,
            analyzed_at=now,
        )
        return SmartReplyRecord(
            id=record_key(conversation_id, user_id),
            conversation_id=conversation_id,
            user_id=user_id,
            replies=replies,
            context_analysis=snapshot,
            generated_at=now,
            expires_at=now + self._config.cache_expiration_ms,
        )

    def _placeholder(self, conversation_id: str, user_id: str) -> SmartReplyRecord:
        return SmartReplyRecord(
            id=record_key(conversation_id, user_id),
            conversation_id=conversation_id,
            user_id=user_id,
            replies=[],
            generated_at=self._clock(),
        )
