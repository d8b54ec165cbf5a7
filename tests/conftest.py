"""Shared test fixtures."""

from collections.abc import Callable

import pytest
from helpers import NOW, FixedClock

from smartreply.config import PipelineConfig
from smartreply.models import ConversationMessage, ConversationSettings


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig()


@pytest.fixture
def conv_settings() -> ConversationSettings:
    return ConversationSettings(id="conv1_user1", conversation_id="conv1", user_id="user1")


@pytest.fixture
def make_message() -> Callable[..., ConversationMessage]:
    """Factory for messages timestamped relative to ``NOW``."""

    def _make(
        text: str,
        *,
        id: str = "m1",
        sender_id: str = "user2",
        minutes_ago: int = 0,
    ) -> ConversationMessage:
        return ConversationMessage(
            id=id,
            text=text,
            sender_id=sender_id,
            timestamp_ms=NOW - minutes_ago * 60_000,
        )

    return _make
