"""Tests for relevance scoring."""

import math

import pytest
from helpers import NOW

from smartreply.analysis.scoring import calculate_relevance_score, score_messages


def test_fresh_short_statement(make_message) -> None:
    result = calculate_relevance_score(make_message("Hi"), NOW)
    assert result.message_id == "m1"
    assert result.factors.recency == 1.0
    assert result.factors.engagement == pytest.approx(0.02)
    assert result.factors.importance == 1.0
    assert result.score == pytest.approx(0.4 + 0.3 * 0.02 + 0.3)


def test_question_raises_importance(make_message) -> None:
    result = calculate_relevance_score(make_message("Are you free?"), NOW)
    assert result.factors.importance == 1.2
    assert result.score == pytest.approx(0.4 + 0.3 * 0.13 + 0.36)


def test_recency_decays_over_a_day(make_message) -> None:
    result = calculate_relevance_score(make_message("Hi", minutes_ago=24 * 60), NOW)
    assert result.factors.recency == pytest.approx(math.exp(-1))


def test_engagement_caps_at_one(make_message) -> None:
    result = calculate_relevance_score(make_message("x" * 250), NOW)
    assert result.factors.engagement == 1


def test_deterministic(make_message) -> None:
    message = make_message("Lunch tomorrow?", minutes_ago=90)
    assert calculate_relevance_score(message, NOW) == calculate_relevance_score(message, NOW)


def test_score_messages_uses_one_reference_time(make_message) -> None:
    messages = [make_message("a", id="m1"), make_message("b", id="m2", minutes_ago=60)]
    scores = score_messages(messages, NOW)
    assert [s.message_id for s in scores] == ["m1", "m2"]
    assert scores[0].factors.recency > scores[1].factors.recency
