"""Collaborator protocols and their SQLite implementations."""

from smartreply.stores.base import (
    CompletionService,
    ContextAnalyzer,
    MessageSource,
    RecordStore,
    SettingsSource,
)
from smartreply.stores.conversations import ConversationStore
from smartreply.stores.messages import MessageStore
from smartreply.stores.records import SqliteRecordStore
from smartreply.stores.settings import (
    SettingsStore,
    requires_regeneration,
    settings_summary,
    validate_settings_update,
)

__all__ = [
    "CompletionService",
    "ContextAnalyzer",
    "ConversationStore",
    "MessageSource",
    "MessageStore",
    "RecordStore",
    "SettingsSource",
    "SettingsStore",
    "SqliteRecordStore",
    "requires_regeneration",
    "settings_summary",
    "validate_settings_update",
]
