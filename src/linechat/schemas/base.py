"""
Base Schema Classes

This module provides the base class for outbound command schemas. The
protocol is plain text: every command renders to a single text frame,
there is no JSON envelope and no length prefix.
"""

from dataclasses import fields

COMMAND_PREFIX = "/"


class BaseCommand:
    """
    Base class for outbound command schemas.

    Subclasses are dataclasses whose fields become the command's
    space-separated arguments, in declaration order.
    """

    def to_wire(self) -> str:
        """
        Render the command as the text frame sent over the transport.

        Returns:
            The command string, e.g. ``/join chat``.
        """
        args = [str(getattr(self, f.name)) for f in fields(self)]
        return " ".join([f"{COMMAND_PREFIX}{self._command_name}", *args])

    @property
    def _command_name(self) -> str:
        """
        Command keyword without the leading slash.

        Should be overridden by subclasses to provide the specific name.
        """
        raise NotImplementedError("Subclasses must define _command_name")
