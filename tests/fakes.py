from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field


@dataclass(slots=True)
class DiagnosticEntry:
    message: str
    error: BaseException | None
    context: object


@dataclass(slots=True)
class RecordingDiagnosticSink:
    """Keeps every reported failure for assertions."""

    entries: list[DiagnosticEntry] = field(default_factory=list)

    def error(self, message: str, error: BaseException | None = None, context: object = None) -> None:
        self.entries.append(DiagnosticEntry(message=message, error=error, context=context))


class BrokenConnection:
    """Connection double whose every statement is rejected by storage."""

    def __init__(self, message: str = "disk I/O error") -> None:
        self.message = message
        self.executed: list[str] = []

    async def execute(self, sql: str, parameters: object = None) -> None:
        self.executed.append(sql)
        raise sqlite3.OperationalError(self.message)

    async def commit(self) -> None:
        return None

    async def close(self) -> None:
        return None


class StaticConnectionProvider:
    def __init__(self, connection: object) -> None:
        self._connection = connection

    async def connection(self) -> object:
        return self._connection

    async def close(self) -> None:
        return None


class Unprintable(Exception):
    """Exception whose ``str()`` itself raises."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message)
        if message is not None:
            self.message = message

    def __str__(self) -> str:
        raise RuntimeError("cannot render")


class UnreadableRequest(dict):
    """Request payload whose field lookup fails while the record is assembled."""

    def get(self, key: object, default: object = None) -> object:
        raise RuntimeError(f"cannot read {key}")
