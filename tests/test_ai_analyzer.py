"""Tests for the AI-backed context analyzer."""

import json

import pytest
from helpers import FakeCompletion

from smartreply.analysis.ai import (
    ANALYSIS_SYSTEM_PROMPT,
    AIContextAnalyzer,
    build_analysis_prompt,
    parse_analysis_result,
)
from smartreply.errors import AnalysisError

_PAYLOAD = {
    "topics": ["travel"],
    "sentiment": "positive",
    "entities": ["Maria Lopez", "Paris city"],
    "language": "es",
    "tone": "auto",
    "relevanceScores": [{"messageId": "m1", "score": 0.5, "reason": "question"}],
}


async def test_analyze_maps_payload(make_message, conv_settings) -> None:
    completion = FakeCompletion(json.dumps(_PAYLOAD))
    analyzer = AIContextAnalyzer(completion, "claude-test-model")

    bundle = await analyzer.analyze([make_message("Hola?")], conv_settings)

    context = bundle.context_analysis
    assert context.topics == ["travel"]
    assert context.sentiment == "positive"
    assert context.language == "es"
    assert context.conversation_tone == "neutral"
    assert context.message_count == 1

    score = bundle.relevance_scores[0]
    assert score.message_id == "m1"
    assert score.factors.recency == pytest.approx(0.2)
    assert score.factors.engagement == pytest.approx(0.15)

    assert bundle.entity_recognition.categories.people == ["Maria Lopez"]
    assert bundle.entity_recognition.categories.places == ["Paris city"]

    call = completion.calls[0]
    assert call["system_prompt"] == ANALYSIS_SYSTEM_PROMPT
    assert call["model"] == "claude-test-model"
    assert call["temperature"] == 0.3


async def test_analyze_caps_batch_at_thirty(make_message, conv_settings) -> None:
    completion = FakeCompletion(json.dumps(_PAYLOAD))
    analyzer = AIContextAnalyzer(completion, "m")
    messages = [make_message(f"msg {i}", id=f"m{i}", minutes_ago=i) for i in range(35)]

    bundle = await analyzer.analyze(messages, conv_settings)

    assert bundle.context_analysis.message_count == 30
    assert completion.calls[0]["user_prompt"].count("Other:") == 30


async def test_transport_error_becomes_analysis_error(make_message, conv_settings) -> None:
    analyzer = AIContextAnalyzer(FakeCompletion(ConnectionError("down")), "m")
    with pytest.raises(AnalysisError, match="down"):
        await analyzer.analyze([make_message("hi")], conv_settings)


async def test_missing_tone_uses_preference(make_message, conv_settings) -> None:
    settings = conv_settings.model_copy(update={"tone_preference": "formal"})
    payload = {k: v for k, v in _PAYLOAD.items() if k != "tone"}
    analyzer = AIContextAnalyzer(FakeCompletion(json.dumps(payload)), "m")

    bundle = await analyzer.analyze([make_message("hi")], settings)

    assert bundle.context_analysis.conversation_tone == "formal"


# -- Parsing -----------------------------------------------------------------


def test_parse_strips_code_fence() -> None:
    text = "```json\n" + json.dumps(_PAYLOAD) + "\n```"
    assert parse_analysis_result(text).language == "es"


def test_parse_rejects_non_json() -> None:
    with pytest.raises(AnalysisError, match="not JSON"):
        parse_analysis_result("I think the conversation is about travel.")


def test_parse_rejects_wrong_shape() -> None:
    with pytest.raises(AnalysisError, match="wrong shape"):
        parse_analysis_result(json.dumps({"sentiment": "ecstatic"}))


def test_parse_rejects_out_of_range_score() -> None:
    payload = {"relevanceScores": [{"messageId": "m1", "score": 3}]}
    with pytest.raises(AnalysisError):
        parse_analysis_result(json.dumps(payload))


def test_prompt_labels_requesting_user(make_message, conv_settings) -> None:
    messages = [
        make_message("Reply", id="m2", sender_id="user1"),
        make_message("Question?", id="m1", sender_id="user2", minutes_ago=5),
    ]
    prompt = build_analysis_prompt(messages, conv_settings)
    assert prompt.index("[m1] Other: Question?") < prompt.index("[m2] User: Reply")
    assert "Tone preference: auto" in prompt
