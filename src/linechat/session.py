"""
Session Controller for the Chat Client

This module drives one chat session over a TransportAdapter. It reacts
to transport lifecycle events, registers an identity and joins the room
when the connection opens, classifies inbound payloads into transcript
entries and turns user input into outbound chat frames.

Architecture:
    - State machine: IDLE -> CONNECTING -> JOINED -> CLOSED | ERRORED
    - The join is fire-and-forget: the protocol has no acknowledgment
    - Transcript output goes through the abstract TranscriptSink
    - Callback hook for UI integration on state changes

Usage:
    controller = SessionController(TransportAdapter(), Transcript())
    await controller.run("ws://127.0.0.1:8080/ws")
"""

import logging
import random
import string
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from .classifier import classify
from .errors import TransportError
from .schemas import (
    ChatMessage,
    ChatText,
    Closed,
    EntryKind,
    Errored,
    JoinCommand,
    LifecycleEvent,
    NameCommand,
    Opened,
    PayloadReceived,
    TranscriptEntry,
)
from .transcript import TranscriptSink
from .transport import TransportAdapter

logger = logging.getLogger(__name__)

# Room joined on every connection
DEFAULT_ROOM = "chat"

IDENTITY_ALPHABET = string.ascii_lowercase + string.digits
DEFAULT_IDENTITY_LENGTH = 5


def generate_identity(length: int = DEFAULT_IDENTITY_LENGTH) -> str:
    """
    Generate a short alphanumeric identity token.

    Uniqueness is advisory only; the server does not verify it.

    Args:
        length: Number of characters in the token

    Returns:
        Random lowercase base-36 string.
    """
    return "".join(random.choices(IDENTITY_ALPHABET, k=length))


class SessionState(str, Enum):
    """Lifecycle state of a chat session."""

    IDLE = "idle"
    CONNECTING = "connecting"
    JOINED = "joined"
    CLOSED = "closed"
    ERRORED = "errored"


TERMINAL_STATES = (SessionState.CLOSED, SessionState.ERRORED)


@dataclass
class Session:
    """
    State owned by one connection lifetime.

    Attributes:
        room: Room joined by this session
        identity: Identity registered on open, None until then
        state: Current lifecycle state
    """

    room: str
    identity: Optional[str] = None
    state: SessionState = SessionState.IDLE

    @property
    def is_terminal(self) -> bool:
        """Check if the session has ended."""
        return self.state in TERMINAL_STATES


class SessionController:
    """
    Connects transport events, the classifier and the transcript.

    Attributes:
        transport: Transport used for sending and lifecycle events
        sink: Destination for transcript entries
        room: Room joined after the connection opens
        session: Current session (None before the first connect)
    """

    def __init__(
        self,
        transport: TransportAdapter,
        sink: TranscriptSink,
        room: str = DEFAULT_ROOM,
        identity_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the session controller.

        Args:
            transport: Transport adapter to drive
            sink: Transcript sink receiving entries
            room: Room to join on open
            identity_factory: Optional identity generator (for testing)
            clock: Optional source of entry timestamps (for testing)
        """
        self.transport = transport
        self.sink = sink
        self.room = room
        self.session: Optional[Session] = None
        self._identity_factory = identity_factory or generate_identity
        self._clock = clock or datetime.now
        self._on_state_changed: Optional[Callable[[SessionState], None]] = None

    @property
    def state(self) -> SessionState:
        """Current session state, IDLE before the first connect."""
        if self.session is None:
            return SessionState.IDLE
        return self.session.state

    @property
    def identity(self) -> Optional[str]:
        """Identity of the current session, if one was assigned."""
        return self.session.identity if self.session else None

    def set_on_state_changed(
        self, callback: Callable[[SessionState], None]
    ) -> None:
        """
        Register callback for session state changes.

        Args:
            callback: Function that receives each new SessionState
        """
        self._on_state_changed = callback

    def start_session(self) -> Session:
        """
        Begin a fresh session for a new connect attempt.

        Returns:
            The new session in IDLE state.
        """
        self.session = Session(room=self.room)
        logger.debug("New session started for room '%s'", self.room)
        return self.session

    async def run(self, endpoint: str) -> SessionState:
        """
        Connect and process lifecycle events until the connection ends.

        Args:
            endpoint: WebSocket URL of the chat server

        Returns:
            The terminal session state.
        """
        self.start_session()
        async for event in self.transport.connect(endpoint):
            await self.handle_event(event)
        return self.state

    async def handle_event(self, event: LifecycleEvent) -> None:
        """
        Process one transport lifecycle event.

        Args:
            event: Event from the transport's event stream
        """
        if self.session is None:
            self.start_session()

        if isinstance(event, Opened):
            await self._handle_opened()
        elif isinstance(event, PayloadReceived):
            self._handle_payload(event.data)
        elif isinstance(event, Closed):
            logger.info("Connection closed (code=%s)", event.code)
            self._set_state(SessionState.CLOSED)
        elif isinstance(event, Errored):
            logger.error("Connection error: %s", event.error)
            self._set_state(SessionState.ERRORED)
        else:
            logger.debug("Unhandled event: %r", event)

    async def submit_user_message(
        self, text: str
    ) -> Optional[TranscriptEntry]:
        """
        Send a chat message typed by the user.

        Blank input is ignored. Input submitted while the session is not
        joined is dropped, not queued.

        Args:
            text: Raw user input

        Returns:
            The SENT transcript entry, or None if nothing was sent.
        """
        content = text.strip()
        if not content:
            return None

        if self.state != SessionState.JOINED:
            logger.debug("Dropping message, session is %s", self.state.value)
            return None

        try:
            await self.transport.send(ChatText(content).to_wire())
        except TransportError as e:
            logger.error("Failed to send message: %s", e)
            return None

        entry = TranscriptEntry(
            kind=EntryKind.SENT, body=text, timestamp=self._clock()
        )
        self.sink.append(entry)
        return entry

    async def _handle_opened(self) -> None:
        """Register identity and join the room."""
        if self.session.is_terminal or self.session.identity is not None:
            logger.warning("Ignoring open event, session already opened")
            return

        self.session.identity = self._identity_factory()
        self._set_state(SessionState.CONNECTING)

        try:
            await self.transport.send(
                NameCommand(self.session.identity).to_wire()
            )
            await self.transport.send(JoinCommand(self.room).to_wire())
        except TransportError as e:
            logger.error("Failed to register identity or join room: %s", e)
            return

        self._set_state(SessionState.JOINED)
        logger.info(
            "Joined room '%s' as %s", self.room, self.session.identity
        )

    def _handle_payload(self, text: str) -> None:
        """Classify an inbound payload and append it to the transcript."""
        if self.session.is_terminal:
            logger.debug("Ignoring payload after session ended")
            return

        message = classify(text)
        if isinstance(message, ChatMessage):
            entry = TranscriptEntry(
                kind=EntryKind.RECEIVED,
                sender=message.sender,
                body=message.body,
                timestamp=self._clock(),
            )
        else:
            entry = TranscriptEntry(
                kind=EntryKind.INFO, body=message.text, timestamp=self._clock()
            )
        self.sink.append(entry)

    def _set_state(self, state: SessionState) -> None:
        """Move to a new state and notify the state callback."""
        if self.session.state == state:
            return
        logger.debug(
            "Session state %s -> %s", self.session.state.value, state.value
        )
        self.session.state = state
        if self._on_state_changed:
            self._on_state_changed(state)
