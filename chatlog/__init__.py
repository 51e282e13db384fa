"""Chronological log of conversation turns with windowed history reads."""

from chatlog.config import ChatlogSettings, load_config
from chatlog.errors import ChatLogError, ChatLogSerializationError, MigrationError
from chatlog.models import ByFlag, ByPage, HistoryWindow, InteractionRecord
from chatlog.persistence import (
    SQLiteChatLogStore,
    SQLiteConnectionProvider,
    create_chatlog_store,
)

__all__ = [
    "ByFlag",
    "ByPage",
    "ChatLogError",
    "ChatLogSerializationError",
    "ChatlogSettings",
    "HistoryWindow",
    "InteractionRecord",
    "MigrationError",
    "SQLiteChatLogStore",
    "SQLiteConnectionProvider",
    "create_chatlog_store",
    "load_config",
]
