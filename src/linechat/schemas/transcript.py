"""
Transcript Entry Schemas

Entries are immutable once built. Timestamps are local wall-clock time at
classification or send time, never the server's.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

TIME_FORMAT = "%H:%M:%S"


class EntryKind(str, Enum):
    """What produced a transcript entry."""

    SENT = "sent"
    RECEIVED = "received"
    INFO = "info"


@dataclass(frozen=True)
class TranscriptEntry:
    """
    One rendered line of the transcript.

    Attributes:
        kind: Whether the entry was sent, received or an info notice
        body: Message text
        sender: Sender prefix for received chat lines, else None
        timestamp: Local time the entry was created
    """

    kind: EntryKind
    body: str
    sender: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def time_string(self) -> str:
        """Timestamp formatted as HH:MM:SS."""
        return self.timestamp.strftime(TIME_FORMAT)

    @property
    def display_text(self) -> str:
        """Text as shown to the user."""
        if self.kind == EntryKind.SENT:
            return f"You: {self.body}"
        if self.kind == EntryKind.RECEIVED:
            return f"{self.sender}: {self.body}"
        return self.body
