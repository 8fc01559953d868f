"""Tests for the inline (scrollback) renderer."""
import io

import pytest
from rich.console import Console

from echoctl.hivemind import ChatMessage, ConnectionFailedError
from echoctl.ui.inline import CURSOR_UP_CLEAR, run_inline


def scripted_reader(*lines):
    """Return an async line reader yielding `lines`, then EOF."""
    pending = list(lines)

    async def read_line():
        return pending.pop(0) if pending else None

    return read_line


def make_console(terminal: bool = False) -> Console:
    return Console(file=io.StringIO(), width=60, height=20, force_terminal=terminal, color_system=None)


class TestRunInline:
    """Tests for the inline chat loop."""

    @pytest.mark.asyncio
    async def test_turn_and_quit(self, fake_client):
        console = make_console()
        client = fake_client(["Hello world"])

        session = await run_inline(client, console=console, read_line=scripted_reader("hi", "/quit"))

        output = console.file.getvalue()
        assert "Echoryn Chat" in output
        assert "Hello world" in output
        assert "Goodbye!" in output
        assert session.history == [
            ChatMessage(role="user", content="hi"),
            ChatMessage(role="assistant", content="Hello world"),
        ]

    @pytest.mark.asyncio
    async def test_eof_ends_session(self, fake_client):
        console = make_console()

        session = await run_inline(fake_client(), console=console, read_line=scripted_reader())

        assert session.history == []
        assert "Goodbye!" in console.file.getvalue()

    @pytest.mark.asyncio
    async def test_blank_lines_ignored(self, fake_client):
        client = fake_client()

        await run_inline(client, console=make_console(), read_line=scripted_reader("", "   "))

        assert client.calls == []

    @pytest.mark.asyncio
    async def test_history_sent_each_turn(self, fake_client):
        client = fake_client(["one", "two"])

        await run_inline(client, console=make_console(), read_line=scripted_reader("a", "b"))

        assert client.calls[1] == [
            ChatMessage(role="user", content="a"),
            ChatMessage(role="assistant", content="one"),
            ChatMessage(role="user", content="b"),
        ]

    @pytest.mark.asyncio
    async def test_clear(self, fake_client):
        console = make_console()
        client = fake_client(["one", "two"])

        session = await run_inline(client, console=console, read_line=scripted_reader("a", "/clear", "b"))

        assert "Conversation cleared." in console.file.getvalue()
        assert client.calls[1] == [ChatMessage(role="user", content="b")]
        assert len(session.history) == 2

    @pytest.mark.asyncio
    async def test_error_shown_and_session_continues(self, fake_client):
        console = make_console()
        client = fake_client(error=ConnectionFailedError("http request: refused"))

        session = await run_inline(client, console=console, read_line=scripted_reader("hi"))

        assert "Error: http request: refused" in console.file.getvalue()
        assert session.history == [ChatMessage(role="user", content="hi")]

    @pytest.mark.asyncio
    async def test_finish_reason_note(self, fake_client):
        console = make_console()
        client = fake_client(["cut off"], finish_reason="length")

        await run_inline(client, console=console, read_line=scripted_reader("hi"))

        assert "[finish: length]" in console.file.getvalue()

    @pytest.mark.asyncio
    async def test_plain_output_not_rewritten(self, fake_client):
        console = make_console(terminal=False)

        await run_inline(fake_client(["plain"]), console=console, read_line=scripted_reader("hi"))

        assert CURSOR_UP_CLEAR not in console.file.getvalue()

    @pytest.mark.asyncio
    async def test_terminal_output_replaced_by_markdown(self, fake_client):
        """Test that the raw stream is erased and re-drawn once the reply completes."""
        console = make_console(terminal=True)

        await run_inline(fake_client(["**bold** reply"]), console=console, read_line=scripted_reader("hi"))

        output = console.file.getvalue()
        raw_at = output.index("**bold** reply")
        assert CURSOR_UP_CLEAR in output[raw_at:]

    @pytest.mark.asyncio
    async def test_debug_sink_installed(self, fake_client):
        client = fake_client()

        def sink(level, component, message):
            pass

        await run_inline(client, console=make_console(), debug_sink=sink, read_line=scripted_reader())

        assert client.debug_callback is sink

    @pytest.mark.asyncio
    async def test_tabbed_reply_fully_erased(self, fake_client):
        """Test that tab stops are counted when erasing a raw reply before the redraw."""
        console = make_console(terminal=True)
        reply = "code:\n" + "\t" * 11 + "return 1"

        await run_inline(fake_client([reply]), console=console, read_line=scripted_reader("hi"))

        output = console.file.getvalue()
        raw_at = output.index("\t" * 11 + "return 1")
        assert CURSOR_UP_CLEAR * 3 in output[raw_at:]
