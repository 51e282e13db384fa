from __future__ import annotations

from chatlog.models.history import (
    MAX_TIMESTAMP,
    Addressing,
    ByFlag,
    ByPage,
    HistoryWindow,
    SortDirection,
    addressing_for,
)
from chatlog.models.interaction import ERR_MAX_LENGTH, InteractionRecord

__all__ = [
    "Addressing",
    "ByFlag",
    "ByPage",
    "ERR_MAX_LENGTH",
    "HistoryWindow",
    "InteractionRecord",
    "MAX_TIMESTAMP",
    "SortDirection",
    "addressing_for",
]
