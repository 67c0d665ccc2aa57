"""
Command Schema Definitions

Outbound frames understood by the chat server: identity registration,
room join and plain chat text.
"""

from dataclasses import dataclass

from .base import BaseCommand


@dataclass(frozen=True)
class NameCommand(BaseCommand):
    """
    Register the display identity for this connection.

    Attributes:
        identity: Client-generated identity token
    """

    identity: str

    @property
    def _command_name(self) -> str:
        return "name"


@dataclass(frozen=True)
class JoinCommand(BaseCommand):
    """
    Join a room.

    Attributes:
        room: Name of the room to join
    """

    room: str

    @property
    def _command_name(self) -> str:
        return "join"


@dataclass(frozen=True)
class ChatText:
    """
    A chat message body.

    Chat text has no envelope: the text itself is the frame.
    """

    text: str

    def to_wire(self) -> str:
        return self.text
