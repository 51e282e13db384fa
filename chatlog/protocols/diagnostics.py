from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DiagnosticSink(Protocol):
    """Fire-and-forget error reporting; implementations must never raise."""

    def error(self, message: str, error: BaseException | None = None, context: object = None) -> None: ...


__all__ = ["DiagnosticSink"]
