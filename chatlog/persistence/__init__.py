"""Persistence: SQLite connection provider, migrations, and the chat log store."""

from chatlog.persistence.chatlog_store import SQLiteChatLogStore
from chatlog.persistence.connection import SQLiteConnectionProvider
from chatlog.persistence.factory import create_chatlog_store
from chatlog.persistence.migrations import apply_migrations, run_migrations

__all__ = [
    "SQLiteChatLogStore",
    "SQLiteConnectionProvider",
    "apply_migrations",
    "create_chatlog_store",
    "run_migrations",
]
