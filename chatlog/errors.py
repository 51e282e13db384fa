"""Exceptions raised by the chat log store."""

from __future__ import annotations


class ChatLogError(Exception):
    """Base class for chat log failures."""


class ChatLogSerializationError(ChatLogError):
    """A payload could not be converted to storable JSON text."""


class MigrationError(ChatLogError):
    """A previously applied migration no longer matches its recorded checksum."""


__all__ = ["ChatLogError", "ChatLogSerializationError", "MigrationError"]
