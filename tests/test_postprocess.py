"""Tests for reply post-processing and canned reply sets."""

from smartreply.pipeline.postprocess import (
    fallback_replies,
    greeting_replies,
    post_process_replies,
)


def test_keeps_first_three_valid(conv_settings) -> None:
    replies = post_process_replies(["one", "two", "three", "four"], conv_settings)
    assert replies == ["one", "two", "three"]


def test_filters_empty_and_long(conv_settings) -> None:
    candidates = ["  ", "x" * 101, "ok", "x" * 100, "fine"]
    assert post_process_replies(candidates, conv_settings) == ["ok", "x" * 100, "fine"]


def test_pads_from_neutral_for_auto(conv_settings) -> None:
    replies = post_process_replies(["ok"], conv_settings)
    assert replies == ["ok", "Thanks for letting me know.", "I'll look into this."]


def test_pads_from_tone_preference(conv_settings) -> None:
    formal = conv_settings.model_copy(update={"tone_preference": "formal"})
    casual = conv_settings.model_copy(update={"tone_preference": "casual"})
    assert post_process_replies([], formal) == fallback_replies(formal)
    assert post_process_replies(["x" * 200], casual) == [
        "Sounds good!",
        "Got it, thanks!",
        "Cool, I'll check it out.",
    ]


def test_output_always_three_valid(conv_settings) -> None:
    for candidates in ([], ["a"], ["a", "b"], ["a"] * 10, [" "] * 5):
        replies = post_process_replies(candidates, conv_settings)
        assert len(replies) == 3
        assert all(r.strip() and len(r) <= 100 for r in replies)


# -- Greetings ---------------------------------------------------------------


def test_greeting_auto_is_casual(conv_settings) -> None:
    assert greeting_replies(conv_settings) == ["Hey there! 👋", "What's up?", "How's it going?"]


def test_greeting_formal(conv_settings) -> None:
    formal = conv_settings.model_copy(update={"tone_preference": "formal"})
    assert greeting_replies(formal)[0] == "Good day! How may I assist you?"
