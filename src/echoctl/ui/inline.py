"""Inline chat mode.

Writes turns straight into the host terminal's scrollback so text stays
selectable. Deltas are printed raw as they arrive; when a reply completes
the raw lines are erased with cursor-up/clear sequences and replaced by the
Markdown render.
"""

import asyncio
import contextlib
import threading
from collections.abc import Awaitable, Callable

from rich.console import Console
from rich.text import Text

from .. import __version__
from ..chat.events import StreamDelta, StreamDone
from ..chat.session import Action, ChatSession
from ..chat.stream import run_turn
from ..hivemind.base import ChatClient
from .callbacks import DebugSink, StreamRelay
from .formatting import (
    COLOR_ACCENT,
    COLOR_ERROR,
    COLOR_MUTED,
    SPINNER_FRAMES,
    build_welcome_banner,
    count_display_lines,
    render_message,
)
from .models import DisplayMessage

CURSOR_UP_CLEAR = "\x1b[A\x1b[K"
CLEAR_LINE = "\r\x1b[K"
THINKING_TEXT = "Thinking..."

LineReaderFn = Callable[[], Awaitable[str | None]]


class LineReader:
    """Reads one prompt line at a time without blocking the event loop.

    Each read runs in a daemon thread so a pending read never keeps the
    process alive after Ctrl-C.
    """

    def __init__(self, console: Console, prompt: str) -> None:
        self._console = console
        self._prompt = prompt

    async def __call__(self) -> str | None:
        """Return the next line, or None on EOF."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str | None] = loop.create_future()

        def resolve(line: str | None, error: BaseException | None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(line)

        def read() -> None:
            line, error = None, None
            try:
                line = self._console.input(self._prompt)
            except EOFError:
                pass
            except Exception as e:
                error = e
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(resolve, line, error)

        threading.Thread(target=read, name="echoctl-input", daemon=True).start()
        return await future


class InlineRenderer:
    """Prints the conversation into the terminal scrollback."""

    def __init__(self, console: Console) -> None:
        self.console = console
        self._raw = ""
        self._thinking = False

    @property
    def width(self) -> int:
        return self.console.width

    def _write(self, text: str) -> None:
        self.console.file.write(text)
        self.console.file.flush()

    def banner(self, session: ChatSession) -> None:
        self.console.print(build_welcome_banner(
            session.model, session.endpoint, session.session_key, __version__
        ))
        self.console.print()

    def user_turn(self, message: DisplayMessage) -> None:
        self.console.print(render_message(message, self.width))

    def start_assistant(self) -> None:
        """Print the assistant label and a thinking indicator until the first delta."""
        self.console.print(render_message(DisplayMessage(role="assistant", raw_content=""), self.width))
        self._raw = ""
        if self.console.is_terminal:
            self.console.print(Text(f"{SPINNER_FRAMES[0]} {THINKING_TEXT}", style=COLOR_MUTED), end="")
            self._thinking = True

    def _clear_thinking(self) -> None:
        if self._thinking:
            self._write(CLEAR_LINE)
            self._thinking = False

    def delta(self, text: str) -> None:
        """Write a fragment raw so it flows into the scrollback as it arrives."""
        self._clear_thinking()
        self._raw += text
        self._write(text)

    def finish(self, committed: list[DisplayMessage], finish_reason: str | None = None) -> None:
        """Replace the raw stream with the committed turn and show any error."""
        self._clear_thinking()
        raw = self._raw
        self._raw = ""
        if raw and not raw.endswith("\n"):
            self._write("\n")

        for message in committed:
            if message.role == "assistant" and message.rendered_content is not None:
                self._replace_raw(raw, message.rendered_content)
            elif message.role == "error":
                self.console.print(Text(f"Error: {message.raw_content}", style=f"bold {COLOR_ERROR}"))

        if finish_reason and finish_reason != "stop":
            self.console.print(f"[finish: {finish_reason}]", style=COLOR_MUTED, markup=False)
        self.console.print()

    def _replace_raw(self, raw: str, rendered: str) -> None:
        if not self.console.is_terminal or not raw:
            return
        rows = count_display_lines(raw.removesuffix("\n"), self.width)
        self._write(CURSOR_UP_CLEAR * rows)
        self._write(rendered + "\n")

    def cleared(self) -> None:
        self.console.print("Conversation cleared.", style=COLOR_MUTED)
        self.console.print()

    def goodbye(self) -> None:
        self.console.print()
        self.console.print("Goodbye!", style="dim")
        self.console.print()


async def stream_inline_turn(
    client: ChatClient,
    session: ChatSession,
    renderer: InlineRenderer,
    debug_sink: DebugSink | None = None,
) -> None:
    """Run one turn, applying every stream event to the session in order.

    Cancelling this coroutine (Ctrl-C) cancels the in-flight request.
    """
    queue: asyncio.Queue = asyncio.Queue()
    relay = StreamRelay(queue.put_nowait, debug_sink=debug_sink)
    task = asyncio.create_task(run_turn(client, session.snapshot(), relay))
    try:
        while True:
            event = await queue.get()
            committed_before = len(session.messages)
            session.handle(event)
            if isinstance(event, StreamDelta):
                renderer.delta(event.text)
            elif isinstance(event, StreamDone):
                renderer.finish(session.messages[committed_before:], session.finish_reason)
                break
    except BaseException:
        task.cancel()
        raise
    await task


async def run_inline(
    client: ChatClient,
    console: Console | None = None,
    debug_sink: DebugSink | None = None,
    read_line: LineReaderFn | None = None,
) -> ChatSession:
    """Run the inline chat loop until /quit, /exit or EOF.

    Returns:
        The session, for callers that want the final history
    """
    console = console or Console()
    renderer = InlineRenderer(console)
    session = ChatSession(
        model=client.model,
        session_key=client.session_key,
        endpoint=client.base_url,
        width=console.width,
        height=console.height,
    )
    read_line = read_line or LineReader(console, f"[bold {COLOR_ACCENT}]> [/]")
    if debug_sink is not None and hasattr(client, "set_debug_callback"):
        client.set_debug_callback(debug_sink)

    renderer.banner(session)
    while True:
        line = await read_line()
        if line is None:
            renderer.goodbye()
            return session

        session.resize(console.width, console.height)
        session.edit(line)
        action = session.submit()

        if action is Action.QUIT:
            renderer.goodbye()
            return session
        if action is Action.CLEAR:
            renderer.cleared()
        elif action is Action.START_TURN:
            renderer.user_turn(session.messages[-1])
            renderer.start_assistant()
            await stream_inline_turn(client, session, renderer, debug_sink)
