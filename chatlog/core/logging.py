"""Root logging setup, per-conversation log fields and the default diagnostic sink.

Store calls wrap themselves in ``correlation_scope``; every record logged inside
the scope carries the sender, page and operation of that call.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime

from chatlog.codec import encode


@dataclass(frozen=True, slots=True)
class CorrelationContext:
    sender_id: str | None = None
    page_id: str | None = None
    operation: str | None = None


_EMPTY_CONTEXT = CorrelationContext()
_CORRELATION_CONTEXT: contextvars.ContextVar[CorrelationContext | None] = contextvars.ContextVar(
    "chatlog_correlation_context",
    default=None,
)


def get_correlation_context() -> CorrelationContext:
    """Fields of the innermost active ``correlation_scope`` in this task."""

    return _CORRELATION_CONTEXT.get() or _EMPTY_CONTEXT


class CorrelationFilter(logging.Filter):
    """Copies sender_id, page_id and operation onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context: CorrelationContext = get_correlation_context()
        record.sender_id = context.sender_id
        record.page_id = context.page_id
        record.operation = context.operation
        return True


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object | None] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "sender_id": getattr(record, "sender_id", None),
            "page_id": getattr(record, "page_id", None),
            "operation": getattr(record, "operation", None),
        }
        context = getattr(record, "chatlog_context", None)
        if context is not None:
            payload["context"] = context
        if record.exc_info is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def setup_logging(level: int | str = logging.INFO, json_output: bool = False) -> None:
    """Replace root handlers with one stdout handler, text or JSON lines."""

    root_logger: logging.Logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.filters.clear()

    handler = logging.StreamHandler(stream=sys.stdout)
    if json_output:
        formatter: logging.Formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s "
            "sender_id=%(sender_id)s page_id=%(page_id)s operation=%(operation)s "
            "%(message)s",
        )
    handler.setFormatter(formatter)

    correlation_filter = CorrelationFilter()
    handler.addFilter(correlation_filter)
    root_logger.addFilter(correlation_filter)
    root_logger.addHandler(handler)


@contextmanager
def correlation_scope(
    *,
    sender_id: str | None = None,
    page_id: str | None = None,
    operation: str | None = None,
) -> Iterator[None]:
    """Set log fields for the enclosed block; ``None`` keeps the outer value."""

    current: CorrelationContext = get_correlation_context()
    updated = CorrelationContext(
        sender_id=current.sender_id if sender_id is None else sender_id,
        page_id=current.page_id if page_id is None else page_id,
        operation=current.operation if operation is None else operation,
    )
    token: contextvars.Token[CorrelationContext | None] = _CORRELATION_CONTEXT.set(updated)
    try:
        yield
    finally:
        _CORRELATION_CONTEXT.reset(token)


class LoggingDiagnosticSink:
    """Reports store failures on the ``chatlog`` logger. ``error`` never raises."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("chatlog")

    def error(self, message: str, error: BaseException | None = None, context: object = None) -> None:
        try:
            rendered = _render_context(context)
            exc_info = (type(error), error, error.__traceback__) if error is not None else None
            self._logger.error(
                "%s: %s context=%s",
                message,
                error,
                rendered,
                exc_info=exc_info,
                extra={"chatlog_context": rendered},
            )
        except Exception:  # noqa: BLE001
            pass


def _render_context(context: object) -> str | None:
    if context is None:
        return None
    try:
        return json.dumps(encode(context), ensure_ascii=True, default=repr, sort_keys=True)
    except (TypeError, ValueError):
        return repr(context)


__all__ = [
    "CorrelationContext",
    "CorrelationFilter",
    "LoggingDiagnosticSink",
    "correlation_scope",
    "get_correlation_context",
    "setup_logging",
]
