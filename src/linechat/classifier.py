"""
Inbound Message Classifier

The protocol carries no type tags, so the client decides what an inbound
line is from its shape alone:

    - Lines starting with ``[`` are chat lines of the form
      ``[room] sender: body``. Only the first colon splits sender from
      body; later colons belong to the body.
    - Anything else is an informational notice, shown as-is.

Known weak point: a notice that happens to start with ``[`` is treated
as chat. This matches the server's current conventions and is left alone.
"""

import logging

from .schemas import ChatMessage, ClassifiedMessage, InfoMessage

logger = logging.getLogger(__name__)

CHAT_PREFIX = "["
SENDER_DELIMITER = ":"


def classify(text: str) -> ClassifiedMessage:
    """
    Classify one decoded inbound payload.

    Args:
        text: Fully decoded payload text

    Returns:
        InfoMessage for notices, ChatMessage for chat lines. A chat line
        without a colon has the whole text as sender and an empty body.
    """
    if not text.startswith(CHAT_PREFIX):
        logger.debug("Classified as info: %r", text)
        return InfoMessage(text=text)

    sender, _, remainder = text.partition(SENDER_DELIMITER)
    message = ChatMessage(sender=sender, body=remainder.strip())
    logger.debug("Classified as chat from %r", message.sender)
    return message
