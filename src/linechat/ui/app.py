"""
Chat Application UI

Terminal user interface for the chat client, built using the Textual
framework. The app is one consumer of the transcript: it subscribes to
it and mounts a widget per entry.
"""

import asyncio
import logging
from typing import Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, ScrollableContainer
from textual.css.query import NoMatches
from textual.widgets import Button, Footer, Header, Input, Static

from ..config import ClientConfig
from ..schemas import EntryKind, TranscriptEntry
from ..session import SessionController, SessionState
from ..transcript import Transcript
from ..transport import TransportAdapter

logger = logging.getLogger(__name__)

STATUS_TEXT = {
    SessionState.IDLE: "[dim]Not connected[/]",
    SessionState.CONNECTING: "[yellow]Connecting...[/]",
    SessionState.JOINED: "[green]Connected[/]",
    SessionState.CLOSED: "[yellow]Disconnected from server[/]",
    SessionState.ERRORED: "[red]Connection error, see log for details[/]",
}

SESSION_FAILED_TEXT = (
    "[red]Session stopped unexpectedly, see log for details[/]"
)


class MessageDisplay(Static):
    """Widget for displaying a single sent or received chat line."""

    def __init__(self, entry: TranscriptEntry) -> None:
        """Initialize message display."""
        super().__init__()
        self.entry = entry

    def compose(self) -> ComposeResult:
        """Compose the message display."""
        yield Static(
            self.entry.display_text, classes="message-content", markup=False
        )
        yield Static(self.entry.time_string, classes="timestamp")


class InfoDisplay(Static):
    """Widget for displaying an info notice from the server."""

    def __init__(self, entry: TranscriptEntry) -> None:
        """Initialize info display."""
        super().__init__()
        self.entry = entry

    def compose(self) -> ComposeResult:
        """Compose the info notice."""
        yield Static(
            self.entry.display_text, classes="message-info", markup=False
        )
        yield Static(self.entry.time_string, classes="timestamp")


def build_entry_widget(entry: TranscriptEntry) -> Static:
    """
    Pick the widget used to render an entry.

    Args:
        entry: Transcript entry to render

    Returns:
        InfoDisplay for notices, MessageDisplay otherwise, tagged with
        a CSS class per entry kind.
    """
    if entry.kind == EntryKind.INFO:
        widget = InfoDisplay(entry)
    else:
        widget = MessageDisplay(entry)
    widget.add_class(entry.kind.value)
    return widget


class ChatApp(App):
    """Main chat application."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #status {
        padding: 0 1;
        background: $surface;
        text-align: center;
    }

    #messages-container {
        height: 1fr;
        padding: 1;
    }

    #message-input-row {
        height: 3;
        padding: 0 1;
    }

    #message-input {
        width: 1fr;
    }

    #send-btn {
        margin: 0 0 0 1;
    }

    MessageDisplay, InfoDisplay {
        padding: 0 0 1 0;
    }

    .sent .message-content {
        text-align: right;
    }

    .message-info {
        text-align: center;
        text-style: italic;
    }

    .timestamp {
        text-style: dim;
    }

    .sent .timestamp {
        text-align: right;
    }

    .info .timestamp {
        text-align: center;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        controller: Optional[SessionController] = None,
    ) -> None:
        """
        Initialize the chat application.

        Args:
            config: Client settings, read from the environment if omitted
            controller: Optional prebuilt controller (for testing)
        """
        super().__init__()
        self.config = config or ClientConfig.from_env()
        if controller is None:
            controller = SessionController(
                TransportAdapter(encoding=self.config.encoding), Transcript()
            )
        self.controller = controller
        self.transcript = controller.sink
        self._session_task: Optional[asyncio.Task] = None

        self.transcript.subscribe(self._on_entry_appended)
        self.controller.set_on_state_changed(self._on_state_changed)

    def compose(self) -> ComposeResult:
        """Compose the main application layout."""
        yield Header()
        yield Static(STATUS_TEXT[SessionState.IDLE], id="status")
        yield ScrollableContainer(id="messages-container")
        with Horizontal(id="message-input-row"):
            yield Input(placeholder="Type a message...", id="message-input")
            yield Button("Send", id="send-btn", variant="primary")
        yield Footer()

    def on_mount(self) -> None:
        """Handle application mount."""
        self.title = "Chat"
        self.sub_title = self.config.server_url
        self._start_session()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button press events."""
        if event.button.id == "send-btn":
            await self._handle_send_message()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        """Handle input submit events (Enter key)."""
        if event.input.id == "message-input":
            await self._handle_send_message()

    def _start_session(self) -> None:
        """Start the background task running the session."""
        if self._session_task:
            self._session_task.cancel()

        async def session_loop():
            try:
                state = await self.controller.run(self.config.server_url)
                logger.info("Session ended in state %s", state.value)
            except asyncio.CancelledError:
                pass
            except Exception as err:
                logger.error("Session error: %s", err)
                self._show_status(SESSION_FAILED_TEXT)

        self._session_task = asyncio.create_task(session_loop())

    async def _handle_send_message(self) -> None:
        """Send the input box content and clear it."""
        message_input = self.query_one("#message-input", Input)
        text = message_input.value

        if not text.strip():
            return

        await self.controller.submit_user_message(text)
        message_input.value = ""

    def _on_entry_appended(self, entry: TranscriptEntry) -> None:
        """Callback when the transcript grows."""
        try:
            messages = self.query_one(
                "#messages-container", ScrollableContainer
            )
            messages.mount(build_entry_widget(entry))
            messages.scroll_end()
        except NoMatches:
            pass

    def _on_state_changed(self, state: SessionState) -> None:
        """Callback when the session state changes."""
        self._show_status(STATUS_TEXT[state])

        if state == SessionState.JOINED:
            self.sub_title = (
                f"{self.config.server_url} as {self.controller.identity}"
            )

    def _show_status(self, text: str) -> None:
        """Replace the status line text."""
        try:
            status = self.query_one("#status", Static)
            status.update(text)
        except NoMatches:
            pass
