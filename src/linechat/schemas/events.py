"""
Transport Lifecycle Events

A connection produces exactly one ``Opened``, zero or more
``PayloadReceived`` and exactly one terminal event (``Closed`` or
``Errored``), in that order.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ConnectionState(str, Enum):
    """State of the underlying transport connection."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    ERRORED = "errored"


@dataclass(frozen=True)
class Opened:
    """The connection is open and ready to send."""

    endpoint: str


@dataclass(frozen=True)
class PayloadReceived:
    """
    A fully decoded inbound text payload.

    Attributes:
        data: Decoded text of one frame
    """

    data: str


@dataclass(frozen=True)
class Closed:
    """
    The connection ended normally.

    Attributes:
        code: WebSocket close code, if one was received
        reason: Close reason sent by the peer
    """

    code: Optional[int] = None
    reason: str = ""


@dataclass(frozen=True)
class Errored:
    """
    The connection failed or ended abnormally.

    Attributes:
        error: The underlying exception
    """

    error: Exception


LifecycleEvent = Union[Opened, PayloadReceived, Closed, Errored]

TERMINAL_EVENTS = (Closed, Errored)
