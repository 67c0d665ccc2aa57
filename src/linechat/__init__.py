"""
Line Chat Client Package

This package provides a client for a minimal line-based chat protocol
over WebSocket: the transport adapter, the session controller that
registers an identity and joins a room, the inbound message classifier
and the transcript sink, plus a terminal user interface.
"""

from .classifier import classify
from .config import ClientConfig
from .errors import DecodeError, LinechatError, TransportError
from .session import (
    DEFAULT_ROOM,
    Session,
    SessionController,
    SessionState,
    generate_identity,
)
from .transcript import Transcript, TranscriptSink
from .transport import TransportAdapter
from .schemas import (
    # Commands
    NameCommand,
    JoinCommand,
    ChatText,
    # Lifecycle events
    ConnectionState,
    Opened,
    PayloadReceived,
    Closed,
    Errored,
    # Inbound messages
    InfoMessage,
    ChatMessage,
    # Transcript
    EntryKind,
    TranscriptEntry,
)

__all__ = [
    # Core classes
    "TransportAdapter",
    "SessionController",
    "Session",
    "SessionState",
    "Transcript",
    "TranscriptSink",
    "ClientConfig",
    "classify",
    "generate_identity",
    "DEFAULT_ROOM",
    # Errors
    "LinechatError",
    "TransportError",
    "DecodeError",
    # Commands
    "NameCommand",
    "JoinCommand",
    "ChatText",
    # Lifecycle events
    "ConnectionState",
    "Opened",
    "PayloadReceived",
    "Closed",
    "Errored",
    # Inbound messages
    "InfoMessage",
    "ChatMessage",
    # Transcript
    "EntryKind",
    "TranscriptEntry",
]
