"""Wire a connection provider and chat log store from settings."""

from __future__ import annotations

from chatlog.config import ChatlogSettings
from chatlog.core.logging import LoggingDiagnosticSink
from chatlog.persistence.chatlog_store import SQLiteChatLogStore
from chatlog.persistence.connection import SQLiteConnectionProvider
from chatlog.protocols.diagnostics import DiagnosticSink


def create_chatlog_store(
    settings: ChatlogSettings,
    *,
    diagnostics: DiagnosticSink | None = None,
) -> tuple[SQLiteConnectionProvider, SQLiteChatLogStore]:
    """Return the provider (close it on shutdown) and the store built on it.

    No connection is opened here; the first store call opens and migrates it.
    """

    diagnostics = diagnostics or LoggingDiagnosticSink()
    provider = SQLiteConnectionProvider(
        settings.db_path,
        migrations_dir=settings.migrations.directory,
        migrations_table=settings.migrations.table,
        skip_migrations=settings.migrations.skip,
        diagnostics=diagnostics,
    )
    store = SQLiteChatLogStore(
        provider,
        diagnostics,
        mute_errors=settings.storage.mute_errors,
        revive_dates=settings.storage.revive_dates,
    )
    return provider, store


__all__ = ["create_chatlog_store"]
