"""SQLite chat log: append conversation turns, read them back around a time anchor."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from chatlog.codec import ISO_DATE_PATTERN, decode, encode, parse_iso, to_iso
from chatlog.core.logging import LoggingDiagnosticSink, correlation_scope
from chatlog.errors import ChatLogSerializationError
from chatlog.models.history import HistoryWindow, addressing_for
from chatlog.models.interaction import ERR_MAX_LENGTH, InteractionRecord
from chatlog.protocols.connection import ConnectionProvider
from chatlog.protocols.diagnostics import DiagnosticSink

logger = logging.getLogger(__name__)

_INSERT = """INSERT INTO chatlogs
    (senderId, time, request, responses, pageId, metadata, flag, timestamp, err)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)"""

_COLUMNS = "senderId, request, responses, metadata, pageId, timestamp, err"

# Metadata members never override the stored columns of a record.
_RESERVED_KEYS = frozenset(
    name
    for field_name, field in InteractionRecord.model_fields.items()
    for name in (field_name, field.alias)
    if name
) | {"metadata"}

_PLAIN_COLUMNS = frozenset({"senderId", "pageId", "timestamp", "err"})

UNKNOWN_ERROR = "unknown error"


class SQLiteChatLogStore:
    def __init__(
        self,
        provider: ConnectionProvider,
        diagnostics: DiagnosticSink | None = None,
        *,
        mute_errors: bool = True,
        revive_dates: bool = False,
    ) -> None:
        self._provider = provider
        self._diagnostics = diagnostics or LoggingDiagnosticSink()
        self.mute_errors = mute_errors
        self.revive_dates = revive_dates

    async def log_interaction(
        self,
        sender_id: str,
        responses: Sequence[Any] | None = None,
        request: Mapping[str, Any] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Append one successful turn. Failures follow ``mute_errors``."""

        await self._append(sender_id, responses, request, metadata, err=None)

    async def log_error(
        self,
        err: object,
        sender_id: str,
        responses: Sequence[Any] | None = None,
        request: Mapping[str, Any] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Append one failed turn with a short description of ``err``."""

        await self._append(sender_id, responses, request, metadata, err=describe_error(err))

    async def get_interactions(
        self,
        sender_id: str,
        page_id: str | None = None,
        limit: int | None = 10,
        end_at: int | float | None = None,
        start_at: int | float | None = None,
    ) -> list[InteractionRecord]:
        """Return up to ``limit`` interactions nearest the anchor, oldest first.

        With ``page_id`` records are matched on sender and page, otherwise on
        ``flag == sender_id``. ``end_at`` selects the rows at or before it
        (walking backwards, bounded below by ``start_at`` or 0); ``start_at``
        alone selects the rows at or after it. With neither bound the most
        recent rows are returned. Both bounds are inclusive and a falsy
        ``limit`` means no limit. Storage errors propagate.
        """

        addressing = addressing_for(page_id)
        window = HistoryWindow.resolve(start_at=start_at, end_at=end_at)

        predicate, params = addressing.predicate(sender_id)
        query_params: list[Any] = list(params)
        query = f"SELECT {_COLUMNS} FROM chatlogs INDEXED BY {addressing.index} WHERE {predicate}"
        if window.bounded:
            query += " AND timestamp BETWEEN ? AND ?"
            query_params.extend((window.lower, window.upper))
        direction = window.direction.value
        query += f" ORDER BY timestamp {direction}, rowid {direction}"
        if limit:
            query += " LIMIT ?"
            query_params.append(int(limit))

        with correlation_scope(sender_id=sender_id, page_id=page_id, operation="get_interactions"):
            db = await self._provider.connection()
            cursor = await db.execute(query, query_params)
            columns = [column[0] for column in cursor.description]
            rows = await cursor.fetchall()
            await cursor.close()
            logger.debug("Fetched %d interactions", len(rows))

        return [self._row_to_record(dict(zip(columns, row))) for row in window.arrange(rows)]

    async def _append(
        self,
        sender_id: str,
        responses: Sequence[Any] | None,
        request: Mapping[str, Any] | None,
        metadata: Mapping[str, Any] | None,
        *,
        err: str | None,
    ) -> None:
        operation = "log_error" if err is not None else "log_interaction"
        record: dict[str, Any] = {"senderId": sender_id}

        with correlation_scope(sender_id=sender_id, operation=operation):
            try:
                request = {} if request is None else request
                responses = [] if responses is None else list(responses)
                metadata = {} if metadata is None else dict(metadata)

                record.update(request=request, responses=responses)
                record.update(metadata)
                record.pop("err", None)
                if err is not None:
                    record["err"] = err
                record["time"] = _resolve_time(request)

                page_id = record.get("pageId")
                flag = metadata.get("flag")
                params = (
                    sender_id,
                    to_iso(record["time"]),
                    _to_json(request, "request"),
                    _to_json(responses, "responses"),
                    str(page_id) if page_id else None,
                    _to_json(metadata, "metadata"),
                    flag if isinstance(flag, str) else None,
                    encode(record.get("timestamp")) or None,
                    err,
                )
                db = await self._provider.connection()
                await db.execute(_INSERT, params)
                await db.commit()
            except Exception as exc:
                self._diagnostics.error("Failed to store chat log", exc, record)
                if not self.mute_errors:
                    raise

    def _row_to_record(self, row: Mapping[str, Any]) -> InteractionRecord:
        data: dict[str, Any] = {
            "senderId": row["senderId"],
            "pageId": row["pageId"],
            "request": json.loads(row["request"]),
            "responses": json.loads(row["responses"]),
            "timestamp": _parse_timestamp(row["timestamp"]),
        }
        if row["err"] is not None:
            data["err"] = row["err"]

        metadata = json.loads(row["metadata"]) if row["metadata"] else {}
        if isinstance(metadata, dict):
            for key, value in metadata.items():
                if key not in _RESERVED_KEYS:
                    data[key] = value

        if self.revive_dates:
            for key, value in data.items():
                if key not in _PLAIN_COLUMNS:
                    data[key] = decode(value)
        return InteractionRecord.model_validate(data)


def describe_error(err: object) -> str:
    """Short text form of ``err`` for the ``err`` column; never raises."""

    try:
        text = str(err).strip()
    except Exception:  # noqa: BLE001
        try:
            text = str(getattr(err, "message", None) or UNKNOWN_ERROR).strip()
        except Exception:  # noqa: BLE001
            text = UNKNOWN_ERROR
    return text[:ERR_MAX_LENGTH] or UNKNOWN_ERROR


def _resolve_time(request: object) -> datetime:
    """Insertion time from the request's own timestamp, else now.

    Numbers are epoch milliseconds; ISO-8601 text is parsed. Values that do not
    describe a representable instant fall back to now.
    """

    stamp = request.get("timestamp") if isinstance(request, Mapping) else None
    try:
        if isinstance(stamp, str) and ISO_DATE_PATTERN.match(stamp):
            stamp = parse_iso(stamp)
        if isinstance(stamp, datetime):
            return stamp if stamp.tzinfo is not None else stamp.replace(tzinfo=UTC)
        if isinstance(stamp, (int, float)) and not isinstance(stamp, bool) and stamp:
            return datetime.fromtimestamp(stamp / 1000, UTC)
    except (OverflowError, OSError, ValueError):
        logger.debug("Ignoring unusable request timestamp %r", stamp)
    return datetime.now(UTC)


def _to_json(value: object, field: str) -> str:
    try:
        return json.dumps(encode(value), ensure_ascii=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise ChatLogSerializationError(f"cannot serialize {field}: {exc}") from exc


def _parse_timestamp(value: object) -> object:
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


__all__ = ["SQLiteChatLogStore", "describe_error"]
