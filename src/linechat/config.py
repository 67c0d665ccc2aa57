"""
Client Configuration

Settings come from environment variables with defaults; command-line
flags in ``main`` override them.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_SERVER_URL = "ws://127.0.0.1:8080/ws"
DEFAULT_ENCODING = "utf-8"
DEFAULT_LOG_FILE = "chat_client.log"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class ClientConfig:
    """
    Runtime settings for the chat client.

    Attributes:
        server_url: WebSocket URL of the chat server
        encoding: Character encoding for binary frames
        log_file: File receiving log output
        log_level: Logging level name
    """

    server_url: str = DEFAULT_SERVER_URL
    encoding: str = DEFAULT_ENCODING
    log_file: str = DEFAULT_LOG_FILE
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "ClientConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (for testing)

        Returns:
            ClientConfig with defaults for unset variables.
        """
        env = os.environ if environ is None else environ
        return cls(
            server_url=env.get("LINECHAT_SERVER_URL", DEFAULT_SERVER_URL),
            encoding=env.get("LINECHAT_ENCODING", DEFAULT_ENCODING),
            log_file=env.get("LINECHAT_LOG_FILE", DEFAULT_LOG_FILE),
            log_level=env.get("LINECHAT_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )

    @property
    def log_level_value(self) -> int:
        """Numeric logging level, WARNING if the name is unknown."""
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.WARNING
