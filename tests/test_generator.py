"""Tests for ReplyGenerator and reply parsing."""

import pytest
from helpers import FakeCompletion

from smartreply.pipeline.generator import (
    FALLBACK_REPLIES,
    MalformedRepliesError,
    ReplyGenerator,
    parse_replies,
)
from smartreply.pipeline.prompt import REPLY_SYSTEM_PROMPT


async def test_generate_returns_all_usable_replies(config) -> None:
    completion = FakeCompletion('["Sure!", "Maybe later", "No thanks", "Extra"]')
    result = await ReplyGenerator(completion, config).generate("prompt")

    assert result.replies == ["Sure!", "Maybe later", "No thanks", "Extra"]
    assert result.fallback_used is False
    assert result.tokens_used == 42
    assert result.model == config.model
    assert result.temperature == 0.7
    assert result.max_tokens == 150

    call = completion.calls[0]
    assert call["system_prompt"] == REPLY_SYSTEM_PROMPT
    assert call["user_prompt"] == "prompt"
    assert call["max_tokens"] == 150


async def test_transport_error_yields_fallback(config) -> None:
    completion = FakeCompletion(TimeoutError("timed out"))
    result = await ReplyGenerator(completion, config).generate("prompt")

    assert result.replies == list(FALLBACK_REPLIES)
    assert result.fallback_used is True
    assert result.tokens_used == 0


async def test_malformed_output_yields_fallback(config) -> None:
    completion = FakeCompletion("Here are some replies: yes, no, maybe")
    result = await ReplyGenerator(completion, config).generate("prompt")

    assert result.replies == list(FALLBACK_REPLIES)
    assert result.fallback_used is True
    assert result.tokens_used == 42


async def test_uses_configured_knobs(config) -> None:
    config = config.updated(temperature=0.2, max_tokens=300, model="sonnet")
    completion = FakeCompletion('["a", "b", "c"]')
    await ReplyGenerator(completion, config).generate("prompt")

    call = completion.calls[0]
    assert call["temperature"] == 0.2
    assert call["max_tokens"] == 300
    assert call["model"] == config.model


# -- Parsing -----------------------------------------------------------------


def test_parse_plain_array() -> None:
    assert parse_replies('["a", "b", "c"]') == ["a", "b", "c"]


@pytest.mark.parametrize(
    "text",
    ['```json\n["a", "b", "c"]\n```', '```\n["a", "b", "c"]\n```'],
)
def test_parse_strips_code_fences(text: str) -> None:
    assert parse_replies(text) == ["a", "b", "c"]


def test_parse_trims_and_drops_blank_entries() -> None:
    assert parse_replies('["  a ", " ", "b", "c"]') == ["a", "b", "c"]


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        '{"replies": ["a", "b", "c"]}',
        '["a", "b"]',
        "[1, 2, 3]",
        '["a", "", "  "]',
    ],
)
def test_parse_rejects_malformed(text: str) -> None:
    with pytest.raises(MalformedRepliesError):
        parse_replies(text)
