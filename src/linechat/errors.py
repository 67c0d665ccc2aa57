"""
Error Types for the Chat Client

All failures are local to the client: nothing here is ever reported back
to the server, and none of these errors terminates the process.
"""


class LinechatError(Exception):
    """Base class for client errors."""


class TransportError(LinechatError, ConnectionError):
    """
    Raised when the connection never opened, or a send was attempted
    while the transport is not open.
    """


class DecodeError(LinechatError, ValueError):
    """Raised when a binary payload cannot be decoded to text."""
