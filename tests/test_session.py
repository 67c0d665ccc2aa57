"""
Tests for the Session Controller

Tests for identity registration, room join sequencing, transcript
production from inbound payloads and user message submission.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from linechat import (
    Closed,
    EntryKind,
    Errored,
    Opened,
    PayloadReceived,
    Session,
    SessionController,
    SessionState,
    Transcript,
    TransportAdapter,
    TransportError,
    generate_identity,
)
from linechat.schemas import TERMINAL_EVENTS

ENDPOINT = "ws://127.0.0.1:8080/ws"
FIXED_TIME = datetime(2025, 1, 1, 12, 30, 0)


class FakeTransport:
    """Transport double replaying preset events and recording sends."""

    def __init__(self, events=(), fail_sends=False):
        self.events = list(events)
        self.fail_sends = fail_sends
        self.sent = []
        self.open = False
        self.endpoint = None

    def connect(self, endpoint):
        self.endpoint = endpoint
        return self._stream()

    async def _stream(self):
        for event in self.events:
            if isinstance(event, Opened):
                self.open = True
            elif isinstance(event, TERMINAL_EVENTS):
                self.open = False
            yield event

    async def send(self, text):
        if not self.open or self.fail_sends:
            raise TransportError("Cannot send: transport is not open")
        self.sent.append(text)


def make_controller(transport=None, identity="x7q"):
    transport = transport or FakeTransport()
    transcript = Transcript()
    controller = SessionController(
        transport,
        transcript,
        identity_factory=lambda: identity,
        clock=lambda: FIXED_TIME,
    )
    return controller, transport, transcript


async def open_controller(identity="x7q"):
    """Build a controller that has processed Opened."""
    controller, transport, transcript = make_controller(identity=identity)
    transport.open = True
    await controller.handle_event(Opened(endpoint=ENDPOINT))
    return controller, transport, transcript


class TestIdentityGeneration:
    """Tests for generate_identity."""

    def test_identity_is_short_alphanumeric(self):
        """Test the identity token format."""
        identity = generate_identity()
        assert len(identity) == 5
        assert identity.isalnum()
        assert identity == identity.lower()

    def test_identity_length(self):
        """Test a custom identity length."""
        assert len(generate_identity(8)) == 8

    def test_identities_vary(self):
        """Test that identities are random."""
        identities = {generate_identity() for _ in range(50)}
        assert len(identities) > 1


class TestSessionInitialization:
    """Tests for SessionController construction."""

    def test_initial_state_is_idle(self):
        """Test a controller before any connect."""
        controller, _, _ = make_controller()
        assert controller.state == SessionState.IDLE
        assert controller.session is None
        assert controller.identity is None
        assert controller.room == "chat"

    def test_start_session(self):
        """Test that a connect attempt creates a fresh session."""
        controller, _, _ = make_controller()
        session = controller.start_session()
        assert session == Session(room="chat")
        assert session.state == SessionState.IDLE
        assert not session.is_terminal


class TestOpenedHandling:
    """Tests for identity registration and room join on open."""

    @pytest.mark.asyncio
    async def test_name_then_join_are_sent(self):
        """Test that /name and /join are sent in order."""
        controller, transport, _ = await open_controller()

        assert transport.sent == ["/name x7q", "/join chat"]
        assert controller.state == SessionState.JOINED
        assert controller.identity == "x7q"

    @pytest.mark.asyncio
    async def test_open_produces_no_transcript_entries(self):
        """Test that the join commands are not shown in the transcript."""
        _, _, transcript = await open_controller()
        assert len(transcript) == 0

    @pytest.mark.asyncio
    async def test_state_changes_are_reported(self):
        """Test the state callback during open."""
        controller, transport, _ = make_controller()
        callback = MagicMock()
        controller.set_on_state_changed(callback)
        transport.open = True

        await controller.handle_event(Opened(endpoint=ENDPOINT))

        states = [call.args[0] for call in callback.call_args_list]
        assert states == [SessionState.CONNECTING, SessionState.JOINED]

    @pytest.mark.asyncio
    async def test_identity_assigned_once(self):
        """Test that a repeated Opened does not re-register."""
        identities = iter(["first", "second"])
        transport = FakeTransport()
        transport.open = True
        controller = SessionController(
            transport, Transcript(), identity_factory=lambda: next(identities)
        )

        await controller.handle_event(Opened(endpoint=ENDPOINT))
        await controller.handle_event(Opened(endpoint=ENDPOINT))

        assert controller.identity == "first"
        assert transport.sent == ["/name first", "/join chat"]

    @pytest.mark.asyncio
    async def test_send_failure_during_join(self):
        """Test that a failed join send leaves the session unjoined."""
        transport = FakeTransport(fail_sends=True)
        controller, _, _ = make_controller(transport)

        await controller.handle_event(Opened(endpoint=ENDPOINT))

        assert controller.state == SessionState.CONNECTING
        assert await controller.submit_user_message("hello") is None


class TestInboundPayloads:
    """Tests for transcript entries produced from inbound payloads."""

    @pytest.mark.asyncio
    async def test_info_payload(self):
        """Test that notices become INFO entries."""
        controller, _, transcript = await open_controller()

        await controller.handle_event(PayloadReceived(data="Welcome to chat"))

        entry = transcript.entries[0]
        assert entry.kind == EntryKind.INFO
        assert entry.body == "Welcome to chat"
        assert entry.sender is None
        assert entry.timestamp == FIXED_TIME

    @pytest.mark.asyncio
    async def test_chat_payload(self):
        """Test that chat lines become RECEIVED entries."""
        controller, _, transcript = await open_controller()

        await controller.handle_event(PayloadReceived(data="[chat] bob: hi"))

        entry = transcript.entries[0]
        assert entry.kind == EntryKind.RECEIVED
        assert entry.sender == "[chat] bob"
        assert entry.body == "hi"

    @pytest.mark.asyncio
    async def test_inbound_order_is_preserved(self):
        """Test that entries follow arrival order around sent entries."""
        controller, _, transcript = await open_controller()

        await controller.handle_event(PayloadReceived(data="A"))
        await controller.submit_user_message("mine")
        await controller.handle_event(PayloadReceived(data="[chat] bob: B"))
        await controller.handle_event(PayloadReceived(data="C"))

        inbound = [
            entry.body
            for entry in transcript
            if entry.kind != EntryKind.SENT
        ]
        assert inbound == ["A", "B", "C"]
        assert [entry.kind for entry in transcript] == [
            EntryKind.INFO,
            EntryKind.SENT,
            EntryKind.RECEIVED,
            EntryKind.INFO,
        ]

    @pytest.mark.asyncio
    async def test_payload_after_close_is_ignored(self):
        """Test that nothing is appended once the session ended."""
        controller, _, transcript = await open_controller()
        await controller.handle_event(Closed(code=1000))

        await controller.handle_event(PayloadReceived(data="late"))

        assert len(transcript) == 0


class TestSubmitUserMessage:
    """Tests for SessionController.submit_user_message."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\t\n"])
    async def test_blank_input_is_ignored(self, text):
        """Test that blank input sends nothing and appends nothing."""
        controller, transport, transcript = await open_controller()

        result = await controller.submit_user_message(text)

        assert result is None
        assert transport.sent == ["/name x7q", "/join chat"]
        assert len(transcript) == 0

    @pytest.mark.asyncio
    async def test_message_is_sent_and_recorded(self):
        """Test a normal chat message."""
        controller, transport, transcript = await open_controller()

        entry = await controller.submit_user_message("hey")

        assert transport.sent[-1] == "hey"
        assert entry.kind == EntryKind.SENT
        assert entry.body == "hey"
        assert entry.sender is None
        assert transcript.entries == (entry,)

    @pytest.mark.asyncio
    async def test_trimmed_text_is_sent(self):
        """Test that the wire text is trimmed and the entry keeps input."""
        controller, transport, _ = await open_controller()

        entry = await controller.submit_user_message("  hey there  ")

        assert transport.sent[-1] == "hey there"
        assert entry.body == "  hey there  "

    @pytest.mark.asyncio
    async def test_command_text_is_sent_verbatim(self):
        """Test that user text starting with a slash is not rewritten."""
        controller, transport, _ = await open_controller()

        await controller.submit_user_message("/join other")

        assert transport.sent[-1] == "/join other"

    @pytest.mark.asyncio
    async def test_message_before_join_is_dropped(self):
        """Test that input before the join is dropped silently."""
        controller, transport, transcript = make_controller()

        result = await controller.submit_user_message("early")

        assert result is None
        assert transport.sent == []
        assert len(transcript) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "terminal,state",
        [
            (Closed(code=1000), SessionState.CLOSED),
            (Errored(error=TransportError("lost")), SessionState.ERRORED),
        ],
    )
    async def test_message_after_terminal_is_dropped(self, terminal, state):
        """Test that no sends happen after the connection ended."""
        controller, transport, transcript = await open_controller()
        transport.open = False
        await controller.handle_event(terminal)

        result = await controller.submit_user_message("too late")

        assert controller.state == state
        assert result is None
        assert transport.sent == ["/name x7q", "/join chat"]
        assert len(transcript) == 0

    @pytest.mark.asyncio
    async def test_send_failure_appends_nothing(self):
        """Test that a transport failure drops the message."""
        controller, transport, transcript = await open_controller()
        transport.fail_sends = True

        result = await controller.submit_user_message("hello")

        assert result is None
        assert len(transcript) == 0


class TestRun:
    """Tests for SessionController.run."""

    @pytest.mark.asyncio
    async def test_run_until_closed(self):
        """Test a complete session driven by the event stream."""
        transport = FakeTransport(
            [
                Opened(endpoint=ENDPOINT),
                PayloadReceived(data="Welcome to chat"),
                Closed(code=1000),
            ]
        )
        controller, _, transcript = make_controller(transport)

        state = await controller.run(ENDPOINT)

        assert state == SessionState.CLOSED
        assert transport.endpoint == ENDPOINT
        assert transport.sent == ["/name x7q", "/join chat"]
        assert [entry.body for entry in transcript] == ["Welcome to chat"]

    @pytest.mark.asyncio
    async def test_run_connection_failure(self):
        """Test a connection that never opens."""
        transport = FakeTransport([Errored(error=TransportError("refused"))])
        controller, _, transcript = make_controller(transport)

        state = await controller.run(ENDPOINT)

        assert state == SessionState.ERRORED
        assert controller.identity is None
        assert transport.sent == []
        assert len(transcript) == 0

    @pytest.mark.asyncio
    async def test_each_run_gets_a_new_session(self):
        """Test that identities do not leak across connections."""
        identities = iter(["one", "two"])
        transport = FakeTransport(
            [Opened(endpoint=ENDPOINT), Closed(code=1000)]
        )
        controller = SessionController(
            transport, Transcript(), identity_factory=lambda: next(identities)
        )

        await controller.run(ENDPOINT)
        first = controller.session
        await controller.run(ENDPOINT)

        assert first.identity == "one"
        assert first.state == SessionState.CLOSED
        assert controller.session is not first
        assert controller.identity == "two"


class TestChatScenario:
    """End-to-end scenario over a mocked WebSocket."""

    @pytest.mark.asyncio
    async def test_welcome_chat_and_reply(self):
        """Test connect, join, receive info and chat, then reply."""

        class MockWebSocket:
            def __init__(self):
                self.sent_messages = []
                self.frames = ["Welcome to chat", b"[chat] bob: hi"]
                self.close_code = 1000
                self.close_reason = ""

            async def send(self, message):
                self.sent_messages.append(message)

            def __aiter__(self):
                return self._iterate()

            async def _iterate(self):
                for frame in self.frames:
                    yield frame

        ws = MockWebSocket()

        async def factory(url):
            return ws

        transport = TransportAdapter(websocket_factory=factory)
        controller, _, transcript = make_controller(transport, identity="x7q")

        async for event in transport.connect(ENDPOINT):
            await controller.handle_event(event)
            if event == PayloadReceived(data="[chat] bob: hi"):
                await controller.submit_user_message("hey")

        assert ws.sent_messages == ["/name x7q", "/join chat", "hey"]
        entries = transcript.entries
        assert [(e.kind, e.sender, e.body) for e in entries] == [
            (EntryKind.INFO, None, "Welcome to chat"),
            (EntryKind.RECEIVED, "[chat] bob", "hi"),
            (EntryKind.SENT, None, "hey"),
        ]
        assert controller.state == SessionState.CLOSED

    @pytest.mark.asyncio
    async def test_socket_send_error_drops_message(self):
        """Test that an unexpected socket error on send drops the message."""

        class MockWebSocket:
            def __init__(self):
                self.sent_messages = []
                self.close_code = 1000
                self.close_reason = ""

            async def send(self, message):
                if message == "hey":
                    raise OSError("Broken pipe")
                self.sent_messages.append(message)

            def __aiter__(self):
                return self._iterate()

            async def _iterate(self):
                yield "Welcome to chat"

        ws = MockWebSocket()

        async def factory(url):
            return ws

        transport = TransportAdapter(websocket_factory=factory)
        controller, _, transcript = make_controller(transport, identity="x7q")

        results = []
        async for event in transport.connect(ENDPOINT):
            await controller.handle_event(event)
            if isinstance(event, PayloadReceived):
                results.append(await controller.submit_user_message("hey"))

        assert results == [None]
        assert ws.sent_messages == ["/name x7q", "/join chat"]
        assert [e.kind for e in transcript.entries] == [EntryKind.INFO]
        assert controller.state == SessionState.CLOSED
