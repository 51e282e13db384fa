"""Chat log store protocol: the write path and the windowed history reader."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from chatlog.models.interaction import InteractionRecord


@runtime_checkable
class ChatLogStore(Protocol):
    async def log_interaction(
        self,
        sender_id: str,
        responses: Sequence[Any] | None = None,
        request: Mapping[str, Any] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None: ...

    async def log_error(
        self,
        err: object,
        sender_id: str,
        responses: Sequence[Any] | None = None,
        request: Mapping[str, Any] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None: ...

    async def get_interactions(
        self,
        sender_id: str,
        page_id: str | None = None,
        limit: int | None = 10,
        end_at: int | float | None = None,
        start_at: int | float | None = None,
    ) -> list[InteractionRecord]: ...


__all__ = ["ChatLogStore"]
