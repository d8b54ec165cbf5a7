"""Smart-reply pipeline stages and the orchestrator that sequences them."""

from smartreply.pipeline.generator import FALLBACK_REPLIES, ReplyGenerator, parse_replies
from smartreply.pipeline.orchestrator import PipelineOrchestrator
from smartreply.pipeline.postprocess import (
    fallback_replies,
    greeting_replies,
    post_process_replies,
)
from smartreply.pipeline.prompt import (
    PromptAugmenter,
    effective_tone,
    format_messages_for_context,
)
from smartreply.pipeline.steps import complete_step, create_performance_metrics, start_step

__all__ = [
    "FALLBACK_REPLIES",
    "PipelineOrchestrator",
    "PromptAugmenter",
    "ReplyGenerator",
    "complete_step",
    "create_performance_metrics",
    "effective_tone",
    "fallback_replies",
    "format_messages_for_context",
    "greeting_replies",
    "parse_replies",
    "post_process_replies",
    "start_step",
]
