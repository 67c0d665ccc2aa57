"""
Transcript Sink

This module provides the boundary between the session layer and whatever
presents the conversation. The session only ever calls ``append``; a
terminal UI, a log file or a test can sit behind it.

Architecture:
    - ``TranscriptSink`` is the abstract interface
    - ``Transcript`` is the in-memory, append-only implementation
    - Consumers subscribe to ``Transcript`` and are notified in append order

Usage:
    transcript = Transcript()
    transcript.subscribe(render_entry)
    transcript.append(entry)
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Iterator, List, Tuple

from .schemas import EntryKind, TranscriptEntry

logger = logging.getLogger(__name__)


class TranscriptSink(ABC):
    """Anything that accepts transcript entries in order."""

    @abstractmethod
    def append(self, entry: TranscriptEntry) -> None:
        """
        Record one entry.

        Args:
            entry: The entry to record. Entries arrive in send/arrival
                   order and must be kept in that order.
        """


class Transcript(TranscriptSink):
    """
    Ordered, append-only log of transcript entries.

    Entries are never removed or reordered, so any snapshot taken from
    ``entries`` is a prefix of every later snapshot.

    Attributes:
        _entries: Entries in append order
        _subscribers: Callbacks notified after each append
    """

    def __init__(self):
        """Initialize an empty transcript."""
        self._entries: List[TranscriptEntry] = []
        self._subscribers: List[Callable[[TranscriptEntry], None]] = []

    def append(self, entry: TranscriptEntry) -> None:
        """
        Append an entry and notify subscribers.

        A subscriber that raises is logged and skipped; the entry stays
        appended and the remaining subscribers are still notified.

        Args:
            entry: The entry to append
        """
        self._entries.append(entry)
        logger.debug(
            "Transcript entry %s appended (%s)", len(self._entries), entry.kind
        )

        for callback in list(self._subscribers):
            try:
                callback(entry)
            except Exception as e:
                logger.error("Transcript subscriber failed: %s", e)

    def subscribe(self, callback: Callable[[TranscriptEntry], None]) -> None:
        """
        Register a callback for new entries.

        Args:
            callback: Function that receives each appended entry
        """
        self._subscribers.append(callback)

    @property
    def entries(self) -> Tuple[TranscriptEntry, ...]:
        """Snapshot of all entries in append order."""
        return tuple(self._entries)

    def filter_kind(self, kind: EntryKind) -> List[TranscriptEntry]:
        """
        Get entries of a single kind, in append order.

        Args:
            kind: Entry kind to keep

        Returns:
            List of matching entries.
        """
        return [entry for entry in self._entries if entry.kind == kind]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TranscriptEntry]:
        return iter(self.entries)
