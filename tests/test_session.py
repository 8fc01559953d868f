"""Unit tests for the chat session state machine."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from echoctl.chat import (
    Action,
    ChatSession,
    Edit,
    Quit,
    Resize,
    StreamDelta,
    StreamDone,
    Submit,
)
from echoctl.hivemind import ChatMessage, StreamInterruptedError, StreamResult


def fake_render(raw: str, width: int) -> str:
    return f"<{width}>{raw}"


@pytest.fixture
def session() -> ChatSession:
    return ChatSession(model="Echoryn", session_key="k", endpoint="http://h", renderer=fake_render)


def send(session: ChatSession, text: str) -> Action:
    session.handle(Edit(text))
    return session.handle(Submit())


class TestSubmit:
    """Tests for submitting the input buffer."""

    def test_start_turn(self, session):
        action = send(session, "  hello  ")

        assert action is Action.START_TURN
        assert session.streaming
        assert session.input_buffer == ""
        assert session.history == [ChatMessage(role="user", content="hello")]
        assert session.messages[-1].role == "user"
        assert session.messages[-1].raw_content == "hello"
        assert session.status == "Generating..."

    @pytest.mark.parametrize("text", ["", "   ", "\t\n"])
    def test_blank_submit_is_noop(self, session, text):
        assert send(session, text) is Action.NONE
        assert session.history == []
        assert not session.streaming

    @pytest.mark.parametrize("command", ["/quit", "/exit", "  /quit "])
    def test_quit_commands(self, session, command):
        assert send(session, command) is Action.QUIT
        assert session.history == []

    def test_quit_event(self, session):
        assert session.handle(Quit()) is Action.QUIT

    def test_clear(self, session):
        send(session, "hi")
        session.handle(StreamDelta("yo"))
        session.handle(StreamDone(result=StreamResult(content="yo", finish_reason="stop")))

        action = send(session, "/clear")

        assert action is Action.CLEAR
        assert session.history == []
        assert session.messages == []
        assert session.input_buffer == ""

    def test_submit_while_streaming_is_noop(self, session):
        """Test that a second turn cannot start before the first completes."""
        send(session, "first")

        session.input_buffer = "second"
        assert session.handle(Submit()) is Action.NONE
        assert len(session.history) == 1
        assert session.input_buffer == "second"

    def test_clear_while_streaming_ignored(self, session):
        send(session, "first")
        session.input_buffer = "/clear"
        assert session.handle(Submit()) is Action.NONE
        assert len(session.history) == 1

    def test_edit_refused_while_streaming(self, session):
        send(session, "first")
        assert session.handle(Edit("typing")) is Action.NONE
        assert session.input_buffer == ""


class TestStreaming:
    """Tests for applying stream events."""

    def test_deltas_accumulate(self, session):
        send(session, "hi")
        session.handle(StreamDelta("Hel"))
        session.handle(StreamDelta("lo"))

        assert session.stream_accumulator == "Hello"

    def test_successful_turn_commits_reply(self, session):
        send(session, "hi")
        session.handle(StreamDelta("Hello"))
        session.handle(StreamDone(result=StreamResult(content="Hello", finish_reason="stop")))

        assert not session.streaming
        assert session.stream_accumulator == ""
        assert session.history[-1] == ChatMessage(role="assistant", content="Hello")
        assert session.messages[-1].rendered_content == f"<{session.content_width}>Hello"
        assert session.status == "Ready"

    def test_empty_reply_is_committed(self, session):
        send(session, "hi")
        session.handle(StreamDone(result=StreamResult()))

        assert session.history[-1] == ChatMessage(role="assistant", content="")

    def test_error_with_partial_keeps_partial(self, session):
        send(session, "hi")
        session.handle(StreamDelta("Hel"))
        session.handle(StreamDone(error=StreamInterruptedError("read stream: reset", partial="Hel")))

        assert session.history[-1] == ChatMessage(role="assistant", content="Hel")
        assert session.messages[-1].role == "error"
        assert session.messages[-1].raw_content == "read stream: reset"
        assert session.status == "read stream: reset"

    def test_error_without_content_not_in_history(self, session):
        """Test that error text is shown but never sent back to the server."""
        send(session, "hi")
        session.handle(StreamDone(error=StreamInterruptedError("http request: refused")))

        assert session.history == [ChatMessage(role="user", content="hi")]
        assert [m.role for m in session.messages] == ["user", "error"]

    def test_stale_events_ignored(self, session):
        assert session.handle(StreamDelta("late")) is Action.NONE
        assert session.handle(StreamDone()) is Action.NONE
        assert session.messages == []

    def test_next_turn_clears_error(self, session):
        send(session, "hi")
        session.handle(StreamDone(error=StreamInterruptedError("boom")))
        send(session, "again")

        assert session.last_error is None

    def test_finish_reason_in_status(self, session):
        send(session, "hi")
        session.handle(StreamDone(result=StreamResult(content="x", finish_reason="length")))

        assert session.status == "Ready (length)"

    def test_history_alternates(self, session):
        for text in ["one", "two", "three"]:
            send(session, text)
            session.handle(StreamDelta(text.upper()))
            session.handle(StreamDone(result=StreamResult(content=text.upper())))

        roles = [m.role for m in session.history]
        assert roles == ["user", "assistant"] * 3

    @given(st.lists(st.text(min_size=1, max_size=10), max_size=15))
    def test_committed_reply_is_delta_concatenation(self, deltas: list[str]):
        """Property test: the committed reply equals all deltas joined in order."""
        session = ChatSession(model="m", renderer=fake_render)
        send(session, "q")
        for delta in deltas:
            session.handle(StreamDelta(delta))
        session.handle(StreamDone(result=StreamResult(content="".join(deltas))))

        assert session.history[-1].content == "".join(deltas)


class TestSnapshot:
    """Tests for history snapshots handed to the stream task."""

    def test_snapshot_is_isolated(self, session):
        send(session, "hi")
        snapshot = session.snapshot()

        session.handle(StreamDelta("yo"))
        session.handle(StreamDone(result=StreamResult(content="yo")))

        assert snapshot == [ChatMessage(role="user", content="hi")]
        assert len(session.history) == 2


class TestResize:
    """Tests for terminal resize handling."""

    def test_resize_rerenders_assistant_turns(self, session):
        send(session, "hi")
        session.handle(StreamDelta("yo"))
        session.handle(StreamDone(result=StreamResult(content="yo")))

        session.handle(Resize(42, 10))

        assert session.width == 42
        assert session.height == 10
        assert session.messages[-1].rendered_content == "<40>yo"

    def test_same_width_keeps_render(self):
        calls = []

        def counting_render(raw, width):
            calls.append(width)
            return raw

        session = ChatSession(model="m", renderer=counting_render)
        send(session, "hi")
        session.handle(StreamDelta("yo"))
        session.handle(StreamDone(result=StreamResult(content="yo")))
        session.handle(Resize(session.width, 50))

        assert calls == [session.content_width]
        assert session.messages[-1].rendered_content == "yo"

    def test_content_width_floor(self, session):
        session.handle(Resize(1, 1))
        assert session.content_width == 1
