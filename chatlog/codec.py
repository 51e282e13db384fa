"""Date-time aware transforms for JSON-like payloads.

``encode`` turns every ``datetime`` nested inside lists and mappings into its
canonical ISO-8601 UTC text, ``decode`` turns such text back into ``datetime``
values. Both return new structures and leave their input untouched, so a
payload shared between concurrent callers is never rewritten underneath them.
Reference cycles are not detected.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import UTC, datetime

ISO_DATE_PATTERN = re.compile(
    r"^(?P<base>\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d)"
    r"(?P<fraction>\.\d+)?"
    r"(?P<offset>([+-]\d\d:\d\d)|Z)?$",
    re.IGNORECASE,
)


def to_iso(value: datetime) -> str:
    """Render ``value`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC.

    Sub-millisecond detail switches to six fractional digits. Naive values
    have no zone to convert from and are rendered without an offset.
    """

    timespec = "milliseconds" if value.microsecond % 1000 == 0 else "microseconds"
    if value.tzinfo is None:
        return value.isoformat(timespec=timespec)
    rendered = value.astimezone(UTC).replace(tzinfo=None).isoformat(timespec=timespec)
    return rendered + "Z"


def parse_iso(text: str) -> datetime:
    """Parse text matching ``ISO_DATE_PATTERN``; no offset gives a naive value."""

    match = ISO_DATE_PATTERN.match(text)
    if match is None:
        raise ValueError(f"not an ISO-8601 date-time: {text!r}")

    normalized = match.group("base").upper()
    fraction = match.group("fraction")
    if fraction:
        # fromisoformat accepts at most six fractional digits
        normalized += "." + fraction[1:7].ljust(6, "0")
    offset = (match.group("offset") or "").upper()
    if offset:
        normalized += "+00:00" if offset == "Z" else offset

    return datetime.fromisoformat(normalized)


def encode(value: object) -> object:
    """Return a copy of ``value`` with every ``datetime`` rendered as ISO text."""

    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, Mapping):
        return {key: encode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode(item) for item in value]
    return value


def decode(value: object) -> object:
    """Return a copy of ``value`` with ISO-8601 strings revived as ``datetime``.

    Only strings that match the full pattern are touched; partial dates such as
    ``"2024-01-01"`` are left alone.
    """

    if isinstance(value, str):
        if ISO_DATE_PATTERN.match(value) is None:
            return value
        try:
            return parse_iso(value)
        except ValueError:
            # shape matched but the calendar value is impossible (e.g. month 13)
            return value
    if isinstance(value, Mapping):
        return {key: decode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [decode(item) for item in value]
    return value


__all__ = [
    "ISO_DATE_PATTERN",
    "decode",
    "encode",
    "parse_iso",
    "to_iso",
]
