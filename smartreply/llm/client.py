"""Async Claude completion client used for reply generation and analysis."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import anthropic

from smartreply.llm.models import friendly

logger = logging.getLogger(__name__)

# The Messages API accepts temperatures in [0, 1]; pipeline configs allow up
# to 2 for providers with a wider range.
_MAX_API_TEMPERATURE = 1.0


@dataclass
class Completion:
    """Text returned by a completion call plus total token usage."""

    text: str
    tokens_used: int = 0


class AnthropicCompletionService:
    """Single-shot Claude calls with no tools and no streaming.

    The underlying ``AsyncAnthropic`` client is created lazily on first use so
    constructing the service never touches the network.

    Args:
        api_key: Anthropic API key.
        timeout_ms: Per-request timeout. This is the only wall-clock bound on
            generation; the pipeline adds none of its own.
    """

    def __init__(self, api_key: str, timeout_ms: int = 60_000) -> None:
        self._api_key = api_key
        self._timeout_s = timeout_ms / 1000
        self._client: anthropic.AsyncAnthropic | None = None

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self._api_key,
                timeout=self._timeout_s,
            )
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> Completion:
        """Send one system + user prompt pair and return the first text block."""
        client = self._get_client()
        response = await client.messages.create(
            model=model,
            max_tokens=max_tokens,
            temperature=min(temperature, _MAX_API_TEMPERATURE),
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        usage = getattr(response, "usage", None)
        tokens = 0
        if usage is not None:
            tokens = (usage.input_tokens or 0) + (usage.output_tokens or 0)

        logger.debug(
            "Completion from %s: %d chars, %d tokens", friendly(model), len(text), tokens
        )
        return Completion(text=text, tokens_used=tokens)
