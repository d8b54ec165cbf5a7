"""Tests for the heuristic context analyzer."""

from helpers import NOW, FixedClock

from smartreply.analysis.heuristic import (
    HeuristicContextAnalyzer,
    analyze_context,
    analyze_sentiment,
    detect_language,
    determine_conversation_tone,
    extract_topics,
)
from smartreply.models import ContextSummary


def test_extract_topics_in_keyword_order() -> None:
    assert extract_topics("Let's BUY some food this Weekend") == ["weekend", "food", "buy"]


def test_sentiment() -> None:
    assert analyze_sentiment("This is great, I love it") == "positive"
    assert analyze_sentiment("I'm sad and worried") == "negative"
    assert analyze_sentiment("good but bad") == "neutral"
    assert analyze_sentiment("") == "neutral"


# -- Tone --------------------------------------------------------------------


def test_tone_formal(make_message) -> None:
    messages = [
        make_message("Could you please send the report?", id="m1"),
        make_message("Thank you so much", id="m2"),
    ]
    assert determine_conversation_tone(messages) == "formal"


def test_tone_casual_counts_emoji(make_message) -> None:
    messages = [make_message("hey lol", id="m1"), make_message("\U0001F600", id="m2")]
    assert determine_conversation_tone(messages) == "casual"


def test_tone_tie_is_neutral(make_message) -> None:
    messages = [make_message("please", id="m1"), make_message("haha", id="m2")]
    assert determine_conversation_tone(messages) == "neutral"


# -- Language ----------------------------------------------------------------


def test_detect_language() -> None:
    assert detect_language("the cat and the dog") == "en"
    assert detect_language("el perro y la casa con pan") == "es"
    assert detect_language("") == "en"
    assert detect_language("12345") == "en"


# -- Analyzer ----------------------------------------------------------------


def test_analyze_context_empty() -> None:
    assert analyze_context([]) == ContextSummary()


def test_analyze_context_summary(make_message) -> None:
    messages = [
        make_message("Hey, the project meeting went great", id="m1"),
        make_message("Awesome! Let's plan the weekend", id="m2"),
    ]
    summary = analyze_context(messages)
    assert summary.topics == ["project", "meeting", "weekend"]
    assert summary.sentiment == "positive"
    assert summary.conversation_tone == "casual"
    assert summary.language == "en"
    assert summary.message_count == 2
    assert "project" in summary.key_entities


async def test_analyzer_bundle_shape(make_message, conv_settings) -> None:
    analyzer = HeuristicContextAnalyzer(clock=FixedClock(NOW))
    messages = [make_message("Lunch tomorrow?", id="m1"), make_message("Sure", id="m2")]

    bundle = await analyzer.analyze(messages, conv_settings)

    assert [s.message_id for s in bundle.relevance_scores] == ["m1", "m2"]
    assert bundle.relevance_scores[0].factors.recency == 1.0
    assert bundle.entity_recognition.categories.dates == ["tomorrow"]
    assert bundle.context_analysis.message_count == 2
