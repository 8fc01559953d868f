"""Full-screen (alt-screen) Textual chat application.

Orchestrates the widgets and feeds every UI and stream event through the
ChatSession, redrawing after each one.
"""

import asyncio
import contextlib

from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.message import Message

from .. import __version__
from ..chat.events import Edit, Event, Resize, Submit
from ..chat.session import Action, ChatSession
from ..chat.stream import run_turn
from ..hivemind.base import ChatClient
from .callbacks import StreamRelay
from .config import SPINNER_INTERVAL, LogLevel
from .formatting import SPINNER_FRAMES
from .styles import APP_CSS
from .themes import ECHORYN_DARK
from .widgets import DebugPanel, HelpLine, PromptInput, ScrollbackView, StatusBar, make_banner


class SessionEvent(Message):
    """Carries a chat event from the stream task into the UI loop."""

    def __init__(self, event: Event) -> None:
        super().__init__()
        self.event = event


class ChatTextualApp(App):
    """Textual TUI for chatting with a hivemind server."""

    CSS = APP_CSS
    TITLE = "Echoryn Chat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True),
        Binding("ctrl+l", "clear_chat", "Clear Chat", priority=True),
        Binding("ctrl+d", "toggle_debug", "Log", priority=True),
        Binding("ctrl+r", "copy_last_response", "Copy Response", priority=True),
    ]

    def __init__(self, client: ChatClient, log_level: str | None = None) -> None:
        super().__init__()
        self._client = client
        self._log_level = log_level
        self._spinner_index = 0
        self._session_ready = False
        self.session = ChatSession(
            model=client.model,
            session_key=client.session_key,
            endpoint=client.base_url,
        )

    @property
    def spinner(self) -> str:
        return SPINNER_FRAMES[self._spinner_index % len(SPINNER_FRAMES)]

    def compose(self) -> ComposeResult:
        yield ScrollbackView(make_banner(self.session, __version__), id="scrollback")
        yield DebugPanel(id="debug-panel")
        yield StatusBar(id="status-bar")
        yield PromptInput(placeholder="Type a message...", id="prompt")
        yield HelpLine(id="help-line")

    def on_mount(self) -> None:
        self.register_theme(ECHORYN_DARK)
        self.theme = "echoryn-dark"

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.log("TUI", f"Log panel enabled with level: {self._log_level.upper()}", LogLevel.INFO)
        if hasattr(self._client, "set_debug_callback"):
            self._client.set_debug_callback(self._debug_callback)

        self.session.resize(self.size.width, self.size.height)
        self.set_interval(SPINNER_INTERVAL, self._tick)
        self._refresh_view()
        self._session_ready = True
        self.query_one("#prompt", PromptInput).focus()

    def _debug_callback(self, level: str, component: str, message: str) -> None:
        """Route trace messages to the log panel."""
        self.query_one("#debug-panel", DebugPanel).log(component, message, LogLevel.from_string(level))

    def dispatch_event(self, event: Event) -> Action:
        """Apply an event to the session and carry out the resulting action."""
        action = self.session.handle(event)
        prompt = self.query_one("#prompt", PromptInput)
        scrollback = self.query_one("#scrollback", ScrollbackView)

        if action is Action.START_TURN:
            prompt.remember(self.session.history[-1].content)
            prompt.value = ""
            self._debug_callback("info", "TUI", f"Turn started ({len(self.session.history)} messages)")
            self._stream(self.session.snapshot())
        elif action is Action.CLEAR:
            prompt.value = ""
            scrollback.clear_messages()
            self._debug_callback("info", "TUI", "Conversation cleared")
        elif action is Action.QUIT:
            self.exit()
            return action

        if isinstance(event, Resize):
            scrollback.rerender(self.session.width)
        self._refresh_view()
        return action

    def _refresh_view(self) -> None:
        self.query_one("#scrollback", ScrollbackView).sync(self.session, self.spinner)
        self.query_one("#status-bar", StatusBar).show_session(self.session, self.spinner)
        prompt = self.query_one("#prompt", PromptInput)
        prompt.locked = self.session.streaming
        prompt.set_class(self.session.streaming, "-streaming")

    def _tick(self) -> None:
        if self.session.streaming:
            self._spinner_index += 1
            self._refresh_view()

    @work(exclusive=True, group="stream")
    async def _stream(self, messages) -> None:
        """Run one turn as a background async worker."""
        relay = StreamRelay(
            lambda event: self.post_message(SessionEvent(event)),
            app=self,
            debug_sink=self._debug_callback,
        )
        await run_turn(self._client, messages, relay)

    def on_session_event(self, message: SessionEvent) -> None:
        self.dispatch_event(message.event)

    def on_resize(self, event: events.Resize) -> None:
        if self._session_ready:
            self.dispatch_event(Resize(event.size.width, event.size.height))

    def on_input_changed(self, event: PromptInput.Changed) -> None:
        if self.dispatch_event(Edit(event.value)) is Action.NONE and event.value != self.session.input_buffer:
            # Editing is locked while a reply streams
            event.input.value = self.session.input_buffer

    def on_input_submitted(self, event: PromptInput.Submitted) -> None:
        self.dispatch_event(Edit(event.value))
        self.dispatch_event(Submit())

    def action_clear_chat(self) -> None:
        """Clear the conversation, same as /clear."""
        if self.session.streaming:
            self.notify("Wait for the reply to finish", severity="warning", timeout=2)
            return
        self.dispatch_event(Edit("/clear"))
        self.dispatch_event(Submit())
        self.notify("Chat cleared", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        for message in reversed(self.session.messages):
            if message.role == "assistant":
                self.copy_to_clipboard(message.raw_content)
                self.notify("Response copied")
                return
        self.notify("No response to copy", severity="warning")


async def run_textual_tui(client: ChatClient, log_level: str | None = None) -> None:
    """Run the full-screen TUI until the user quits.

    Args:
        client: Connected hivemind client, shared across turns
        log_level: Log level for panel (debug/info/warning/error), None to hide
    """
    app = ChatTextualApp(client=client, log_level=log_level)
    with contextlib.suppress(KeyboardInterrupt, asyncio.CancelledError):
        await app.run_async()
