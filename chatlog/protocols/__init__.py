from chatlog.protocols.connection import ConnectionProvider
from chatlog.protocols.diagnostics import DiagnosticSink
from chatlog.protocols.store import ChatLogStore

__all__ = ["ChatLogStore", "ConnectionProvider", "DiagnosticSink"]
