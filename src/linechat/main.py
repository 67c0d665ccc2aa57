#!/usr/bin/env python3
"""
Chat Client Application

Client application for connecting to a line-based chat server.
Provides a terminal-based user interface using the Textual framework.

Usage:
    linechat
    linechat --url ws://127.0.0.1:8080/ws --log-level INFO
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import ClientConfig

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Terminal client for a line-based chat server"
    )
    parser.add_argument(
        "--url",
        default=None,
        help="WebSocket URL of the chat server (env: LINECHAT_SERVER_URL)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="File receiving log output (env: LINECHAT_LOG_FILE)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level name (env: LINECHAT_LOG_LEVEL)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ClientConfig:
    """Merge command-line flags over the environment config."""
    config = ClientConfig.from_env()
    if args.url:
        config.server_url = args.url
    if args.log_file:
        config.log_file = args.log_file
    if args.log_level:
        config.log_level = args.log_level.upper()
    return config


def configure_logging(config: ClientConfig) -> None:
    """Send logs to a file to avoid interfering with the UI."""
    logging.basicConfig(
        level=config.log_level_value,
        format=LOG_FORMAT,
        handlers=[logging.FileHandler(config.log_file, mode="a")],
    )


def main(argv: Optional[List[str]] = None):
    """Main entry point for the chat client."""
    config = build_config(parse_args(argv))
    configure_logging(config)
    logger.info("Starting chat client for %s...", config.server_url)

    try:
        from .ui import ChatApp

        app = ChatApp(config)
        app.run()
    except ImportError as e:
        print(f"Error: Could not import UI components: {e}")
        print("Make sure textual is installed: pip install textual")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nExiting...")
        sys.exit(0)


if __name__ == "__main__":
    main()
