from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from chatlog.persistence.chatlog_store import SQLiteChatLogStore
from chatlog.persistence.connection import SQLiteConnectionProvider

from tests.fakes import RecordingDiagnosticSink


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "chatlogs.db")


@pytest.fixture
def diagnostics() -> RecordingDiagnosticSink:
    return RecordingDiagnosticSink()


@pytest.fixture
async def provider(
    db_path: str, diagnostics: RecordingDiagnosticSink
) -> AsyncIterator[SQLiteConnectionProvider]:
    provider = SQLiteConnectionProvider(db_path, diagnostics=diagnostics)
    yield provider
    await provider.close()


@pytest.fixture
def store(
    provider: SQLiteConnectionProvider, diagnostics: RecordingDiagnosticSink
) -> SQLiteChatLogStore:
    return SQLiteChatLogStore(provider, diagnostics)
