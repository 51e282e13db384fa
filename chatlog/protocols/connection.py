from __future__ import annotations

from typing import Protocol, runtime_checkable

import aiosqlite


@runtime_checkable
class ConnectionProvider(Protocol):
    async def connection(self) -> aiosqlite.Connection: ...

    async def close(self) -> None: ...


__all__ = ["ConnectionProvider"]
