"""Tests for model name resolution."""

from smartreply.llm.models import MODEL_MAP, friendly, resolve_model


def test_resolve_friendly_name() -> None:
    assert resolve_model("haiku") == MODEL_MAP["haiku"]
    assert resolve_model(" Sonnet ") == MODEL_MAP["sonnet"]


def test_resolve_passes_unknown_ids_through() -> None:
    assert resolve_model("claude-custom-1") == "claude-custom-1"


def test_friendly_round_trip() -> None:
    assert friendly(MODEL_MAP["opus"]) == "opus"
    assert friendly("claude-custom-1") == "claude-custom-1"
