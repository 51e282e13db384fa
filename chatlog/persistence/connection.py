"""Shared aiosqlite connection for the chat log store."""

from __future__ import annotations

import asyncio
import contextlib
import sqlite3
import sys
from pathlib import Path

import aiosqlite

from chatlog.core.logging import LoggingDiagnosticSink
from chatlog.persistence.migrations import DEFAULT_MIGRATIONS_TABLE, apply_migrations
from chatlog.protocols.diagnostics import DiagnosticSink

# Gives log handlers a moment to flush before the process exits.
FATAL_EXIT_DELAY_S = 0.4


class SQLiteConnectionProvider:
    """Open one connection on first use, migrate it, and hand it to every caller.

    Setup failure is not recoverable: it is reported through the diagnostic
    sink and the process exits with status 1. Callers awaiting ``connection()``
    never receive a half-initialised handle.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        connection: aiosqlite.Connection | None = None,
        migrations_dir: Path | None = None,
        migrations_table: str = DEFAULT_MIGRATIONS_TABLE,
        skip_migrations: bool = False,
        diagnostics: DiagnosticSink | None = None,
    ) -> None:
        if db_path is None and connection is None:
            raise ValueError("either db_path or connection is required")
        self.db_path = str(db_path) if db_path is not None else None
        self._injected = connection
        self._migrations_dir = migrations_dir
        self._migrations_table = migrations_table
        self._skip_migrations = skip_migrations
        self._diagnostics = diagnostics or LoggingDiagnosticSink()
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def connection(self) -> aiosqlite.Connection:
        if self._connection is not None:
            return self._connection
        async with self._lock:
            if self._connection is None:
                self._connection = await self._create_connection()
        return self._connection

    async def _create_connection(self) -> aiosqlite.Connection:
        opened: aiosqlite.Connection | None = None
        try:
            if self._injected is not None:
                db = self._injected
            else:
                db_path = str(self.db_path)
                if db_path != ":memory:":
                    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
                db = opened = await aiosqlite.connect(db_path)

            if not self._skip_migrations:
                await apply_migrations(db, self._migrations_dir, self._migrations_table)

            return db
        except Exception as exc:
            self._diagnostics.error("SQLITE ERROR", exc)
            if opened is not None:
                with contextlib.suppress(sqlite3.Error):
                    await opened.close()
            await asyncio.sleep(FATAL_EXIT_DELAY_S)
            sys.exit(1)

    async def close(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        await connection.close()


__all__ = ["FATAL_EXIT_DELAY_S", "SQLiteConnectionProvider"]
