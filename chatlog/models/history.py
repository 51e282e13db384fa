"""Query shapes for reading the interaction history."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, TypeVar

# Largest value an SQLite INTEGER can hold; open-ended upper bound for forward reads.
MAX_TIMESTAMP = 2**63 - 1

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ByPage:
    """Address records written with a page identity: ``senderId`` + ``pageId``."""

    page_id: str
    index: ClassVar[str] = "page_sender_timestamp"

    def predicate(self, sender_id: str) -> tuple[str, tuple[str, ...]]:
        return "senderId = ? AND pageId = ?", (sender_id, self.page_id)


@dataclass(frozen=True, slots=True)
class ByFlag:
    """Address records by their correlation flag; the sender id is the flag value."""

    index: ClassVar[str] = "flag"

    def predicate(self, sender_id: str) -> tuple[str, tuple[str, ...]]:
        return "flag = ?", (sender_id,)


Addressing = ByPage | ByFlag


def addressing_for(page_id: str | None) -> Addressing:
    if page_id:
        return ByPage(page_id)
    return ByFlag()


class SortDirection(StrEnum):
    ascending = "ASC"
    descending = "DESC"


@dataclass(frozen=True, slots=True)
class HistoryWindow:
    """Which rows a history read selects, and in which order it fetches them.

    The fetch direction decides which ``limit`` rows are nearest the anchor;
    ``arrange`` always hands rows back oldest first.
    """

    direction: SortDirection
    lower: int | float | None = None
    upper: int | float | None = None

    @classmethod
    def resolve(
        cls,
        start_at: int | float | None = None,
        end_at: int | float | None = None,
    ) -> HistoryWindow:
        if end_at is not None:
            return cls(
                direction=SortDirection.descending,
                lower=start_at if start_at is not None else 0,
                upper=end_at,
            )
        if start_at is not None:
            return cls(direction=SortDirection.ascending, lower=start_at, upper=MAX_TIMESTAMP)
        return cls(direction=SortDirection.descending)

    @property
    def bounded(self) -> bool:
        return self.lower is not None and self.upper is not None

    def arrange(self, rows: Sequence[T]) -> list[T]:
        if self.direction is SortDirection.descending:
            return list(reversed(rows))
        return list(rows)


__all__ = [
    "Addressing",
    "ByFlag",
    "ByPage",
    "HistoryWindow",
    "MAX_TIMESTAMP",
    "SortDirection",
    "addressing_for",
]
