"""
Transport Adapter for the Chat Client

This module wraps a single WebSocket connection and turns it into an
ordered stream of lifecycle events. It knows nothing about chat commands
or message formats: it only opens the connection, decodes frames to text
and sends text frames.

Architecture:
    - ``connect()`` returns an async generator of lifecycle events
    - Exactly one ``Opened``, then ``PayloadReceived`` events, then exactly
      one terminal ``Closed`` or ``Errored``
    - Binary frames are fully decoded before they are emitted
    - Supports dependency injection for the network layer (for testability)

Usage:
    transport = TransportAdapter()
    async for event in transport.connect("ws://127.0.0.1:8080/ws"):
        ...
"""

import logging
from typing import AsyncIterator, Callable, Optional, Union

import websockets

from .errors import DecodeError, TransportError
from .schemas import (
    Closed,
    ConnectionState,
    Errored,
    LifecycleEvent,
    Opened,
    PayloadReceived,
)

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"


class TransportAdapter:
    """
    Persistent, ordered, bidirectional text transport.

    Attributes:
        endpoint: WebSocket URL of the last connect attempt
        encoding: Character encoding used for binary frames
        websocket: Active WebSocket connection (None if not connected)
    """

    def __init__(
        self,
        websocket_factory: Optional[Callable] = None,
        encoding: str = DEFAULT_ENCODING,
    ):
        """
        Initialize the transport.

        Args:
            websocket_factory: Optional factory for creating WebSocket
                             connections (for dependency injection/testing)
            encoding: Character encoding for binary frames
        """
        self.endpoint: Optional[str] = None
        self.encoding = encoding
        self.websocket = None
        self._websocket_factory = websocket_factory or websockets.connect
        self._state: Optional[ConnectionState] = None

    @property
    def state(self) -> Optional[ConnectionState]:
        """Current connection state, None before the first connect."""
        return self._state

    @property
    def is_open(self) -> bool:
        """Check if the connection is open for sending."""
        return (
            self._state == ConnectionState.OPEN and self.websocket is not None
        )

    def connect(self, endpoint: str) -> AsyncIterator[LifecycleEvent]:
        """
        Start a connection and return its lifecycle event stream.

        The connection attempt runs when iteration starts; this call never
        blocks.

        Args:
            endpoint: WebSocket URL of the chat server

        Returns:
            Async iterator of lifecycle events ending with one terminal event

        Raises:
            TransportError: If a connection is already active
        """
        if self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN):
            raise TransportError(
                f"Transport already connected to {self.endpoint}"
            )

        self.endpoint = endpoint
        self._state = ConnectionState.CONNECTING
        return self._event_stream(endpoint)

    async def send(self, text: str) -> None:
        """
        Send one text frame.

        Args:
            text: Frame content

        Raises:
            TransportError: If the transport is not open or the send fails
        """
        if not self.is_open:
            raise TransportError("Cannot send: transport is not open")

        try:
            await self.websocket.send(text)
        except websockets.exceptions.ConnectionClosed as e:
            logger.error("Send failed, connection closed: %s", e)
            raise TransportError(f"Send failed: {e}") from e
        except Exception as e:
            logger.error("Send failed: %s", e)
            raise TransportError(f"Send failed: {e}") from e

        logger.debug("Sent frame: %r", text)

    async def _event_stream(
        self, endpoint: str
    ) -> AsyncIterator[LifecycleEvent]:
        """
        Drive one connection from open to its terminal event.

        If the consumer stops iterating early (``aclose()``, task
        cancellation or garbage collection), the connection is closed and
        the transport returns to CLOSED so it can connect again.
        """
        terminal: Optional[LifecycleEvent] = None
        try:
            try:
                logger.info("Connecting to %s...", endpoint)
                self.websocket = await self._websocket_factory(endpoint)
            except Exception as e:
                logger.error("Failed to connect to %s: %s", endpoint, e)
                terminal = self._errored(
                    TransportError(f"Could not connect to {endpoint}: {e}")
                )
            else:
                self._state = ConnectionState.OPEN
                logger.info("Connected to %s", endpoint)
                yield Opened(endpoint=endpoint)
                try:
                    async for frame in self.websocket:
                        try:
                            text = self._decode(frame)
                        except DecodeError as e:
                            logger.warning(
                                "Dropping undecodable payload: %s", e
                            )
                            continue
                        logger.debug("Received payload: %r", text)
                        yield PayloadReceived(data=text)
                except websockets.exceptions.ConnectionClosedOK as e:
                    terminal = self._closed(
                        e.rcvd.code if e.rcvd else None,
                        e.rcvd.reason if e.rcvd else "",
                    )
                except websockets.exceptions.ConnectionClosedError as e:
                    logger.warning("Connection closed abnormally: %s", e)
                    terminal = self._errored(
                        TransportError(f"Connection lost: {e}")
                    )
                except Exception as e:
                    logger.error("Error in receive loop: %s", e)
                    terminal = self._errored(e)
                else:
                    terminal = self._closed(
                        getattr(self.websocket, "close_code", None),
                        getattr(self.websocket, "close_reason", None) or "",
                    )
        finally:
            if terminal is None:
                await self._abandon()
            self.websocket = None

        yield terminal

    async def _abandon(self) -> None:
        """Close a connection whose event stream was left unfinished."""
        websocket = self.websocket
        self.websocket = None
        if self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN):
            self._state = ConnectionState.CLOSED
        if websocket is None:
            return

        # Only close if it's a real WebSocket connection
        if hasattr(websocket, "close"):
            try:
                await websocket.close()
            except Exception as e:
                logger.warning("Error closing abandoned connection: %s", e)
        logger.info(
            "Event stream for %s abandoned, connection closed", self.endpoint
        )

    def _closed(self, code: Optional[int], reason: str) -> Closed:
        self._state = ConnectionState.CLOSED
        logger.info("Disconnected from %s (code=%s)", self.endpoint, code)
        return Closed(code=code, reason=reason)

    def _errored(self, error: Exception) -> Errored:
        self._state = ConnectionState.ERRORED
        return Errored(error=error)

    def _decode(self, frame: Union[str, bytes]) -> str:
        """
        Convert a frame to text.

        Raises:
            DecodeError: If a binary frame is not valid in ``encoding``
        """
        if isinstance(frame, str):
            return frame
        try:
            return bytes(frame).decode(self.encoding)
        except (UnicodeDecodeError, TypeError) as e:
            raise DecodeError(
                f"Payload is not valid {self.encoding}: {e}"
            ) from e
