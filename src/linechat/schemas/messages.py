"""
Classified Message Schemas

Every inbound payload is classified as exactly one of these.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class InfoMessage:
    """
    A system or administrative notice, rendered without a sender.

    Attributes:
        text: The full notice text, unchanged
    """

    text: str


@dataclass(frozen=True)
class ChatMessage:
    """
    A chat line from another user.

    Attributes:
        sender: Everything before the first colon, e.g. ``[chat] bob``
        body: Everything after the first colon, trimmed
    """

    sender: str
    body: str


ClassifiedMessage = Union[InfoMessage, ChatMessage]
