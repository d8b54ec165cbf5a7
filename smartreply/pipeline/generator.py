"""Reply generation via the completion service."""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Annotated

from pydantic import Field, StrictStr, TypeAdapter, ValidationError

from smartreply.models import GenerationResult
from smartreply.pipeline.prompt import REPLY_SYSTEM_PROMPT

if TYPE_CHECKING:
    from smartreply.config import PipelineConfig
    from smartreply.stores.base import CompletionService

logger = logging.getLogger(__name__)

FALLBACK_REPLIES: tuple[str, ...] = (
    "That sounds great!",
    "I'll get back to you on that.",
    "Let me think about it.",
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")

_REPLY_ARRAY = TypeAdapter(Annotated[list[StrictStr], Field(min_length=3)])


class MalformedRepliesError(ValueError):
    """Model output was not a JSON array with at least 3 usable strings."""


def parse_replies(text: str) -> list[str]:
    """Parse model output into trimmed, non-empty reply strings.

    Accepts a bare JSON array or one wrapped in a Markdown code fence.
    Raises MalformedRepliesError for anything else, or when fewer than 3
    entries survive trimming.
    """
    cleaned = _FENCE_RE.sub("", text.strip())
    try:
        raw = _REPLY_ARRAY.validate_python(json.loads(cleaned))
    except (json.JSONDecodeError, ValidationError) as exc:
        msg = f"unparseable reply array: {exc}"
        raise MalformedRepliesError(msg) from exc

    replies = [r.strip() for r in raw if r.strip()]
    if len(replies) < 3:
        msg = f"only {len(replies)} usable replies"
        raise MalformedRepliesError(msg)
    return replies


class ReplyGenerator:
    """Turns a prompt into candidate replies. Never raises.

    Transport errors and malformed output both produce the fixed fallback
    triplet with ``fallback_used=True``.
    """

    def __init__(self, completion: CompletionService, config: PipelineConfig) -> None:
        self._completion = completion
        self._config = config

    async def generate(self, prompt: str) -> GenerationResult:
        model = self._config.model
        tokens_used = 0
        try:
            completion = await self._completion.complete(
                REPLY_SYSTEM_PROMPT,
                prompt,
                model=model,
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
            )
            tokens_used = completion.tokens_used
            replies = parse_replies(completion.text)
        except MalformedRepliesError as exc:
            logger.warning("Model returned malformed replies, using fallback: %s", exc)
            return self._fallback(model, tokens_used)
        except Exception:
            logger.warning("Reply generation failed, using fallback", exc_info=True)
            return self._fallback(model, tokens_used)

        return GenerationResult(
            replies=replies,
            model=model,
            tokens_used=tokens_used,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

    def _fallback(self, model: str, tokens_used: int) -> GenerationResult:
        return GenerationResult(
            replies=list(FALLBACK_REPLIES),
            model=model,
            tokens_used=tokens_used,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
            fallback_used=True,
        )
