from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

ERR_MAX_LENGTH = 73


class InteractionRecord(BaseModel):
    """One logged request/response turn for a sender.

    Field names follow the stored column names through aliases. Members of the
    stored metadata mapping come back as extra attributes, so a record read
    from the log exposes them at the top level next to the columns.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    sender_id: str = Field(alias="senderId")
    page_id: str | None = Field(default=None, alias="pageId")
    time: datetime | None = None
    timestamp: int | float | str | None = None
    request: Any = None
    responses: list[Any] = Field(default_factory=list)
    err: str | None = Field(default=None, min_length=1, max_length=ERR_MAX_LENGTH)

    @property
    def failed(self) -> bool:
        return self.err is not None

    def as_dict(self) -> dict[str, Any]:
        """Wire form: stored column names with metadata merged in.

        ``err`` only appears for failed turns.
        """

        data = self.model_dump(by_alias=True, exclude={"time"} if self.time is None else None)
        if self.err is None:
            data.pop("err", None)
        return data


__all__ = ["ERR_MAX_LENGTH", "InteractionRecord"]
