"""
Schemas Package

This package contains the data shapes of the chat protocol and the
transcript: outbound commands, transport lifecycle events, classified
inbound messages and transcript entries.
"""

from .base import BaseCommand, COMMAND_PREFIX
from .commands import NameCommand, JoinCommand, ChatText
from .events import (
    ConnectionState,
    Opened,
    PayloadReceived,
    Closed,
    Errored,
    LifecycleEvent,
    TERMINAL_EVENTS,
)
from .messages import InfoMessage, ChatMessage, ClassifiedMessage
from .transcript import EntryKind, TranscriptEntry

__all__ = [
    # Commands
    "BaseCommand",
    "COMMAND_PREFIX",
    "NameCommand",
    "JoinCommand",
    "ChatText",
    # Lifecycle events
    "ConnectionState",
    "Opened",
    "PayloadReceived",
    "Closed",
    "Errored",
    "LifecycleEvent",
    "TERMINAL_EVENTS",
    # Inbound messages
    "InfoMessage",
    "ChatMessage",
    "ClassifiedMessage",
    # Transcript
    "EntryKind",
    "TranscriptEntry",
]
