"""Interactive chat session state machine.

Owns the conversation history, the displayed messages, the input buffer and
the streaming state. It performs no I/O: the UI feeds it events and acts on
the returned Action (start a stream, quit, redraw).
"""

from collections.abc import Callable
from enum import Enum

from ..hivemind.models import ChatMessage
from ..ui.formatting import render_markdown
from ..ui.models import DisplayMessage
from .events import Edit, Event, Quit, Resize, StreamDelta, StreamDone, Submit

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

QUIT_COMMANDS = ("/quit", "/exit")
CLEAR_COMMAND = "/clear"

MarkdownRenderer = Callable[[str, int], str]


class Action(str, Enum):
    """What the UI must do after an event was applied."""

    NONE = "none"
    RENDER = "render"
    START_TURN = "start_turn"
    CLEAR = "clear"
    QUIT = "quit"


class ChatSession:
    """State of one interactive conversation.

    Invariants:
    - `streaming` is True exactly while one stream request is outstanding.
    - While streaming, `stream_accumulator` holds the partial assistant reply.
    - The input buffer only changes while not streaming.
    """

    def __init__(
        self,
        model: str,
        session_key: str = "",
        endpoint: str = "",
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        renderer: MarkdownRenderer = render_markdown,
    ) -> None:
        self.model = model
        self.session_key = session_key
        self.endpoint = endpoint
        self.width = width
        self.height = height
        self._renderer = renderer

        self.history: list[ChatMessage] = []
        self.messages: list[DisplayMessage] = []
        self.input_buffer = ""
        self.streaming = False
        self.stream_accumulator = ""
        self.last_error: str | None = None
        self.finish_reason: str | None = None

    def handle(self, event: Event) -> Action:
        """Apply a single event and report the follow-up action."""
        if isinstance(event, Edit):
            return Action.RENDER if self.edit(event.text) else Action.NONE
        if isinstance(event, Submit):
            return self.submit()
        if isinstance(event, Resize):
            self.resize(event.width, event.height)
            return Action.RENDER
        if isinstance(event, StreamDelta):
            return Action.RENDER if self.apply_delta(event.text) else Action.NONE
        if isinstance(event, StreamDone):
            if not self.streaming:
                return Action.NONE
            self.finish(event.error, event.result.finish_reason if event.result else None)
            return Action.RENDER
        if isinstance(event, Quit):
            return Action.QUIT
        raise TypeError(f"Unknown event: {event!r}")

    def edit(self, text: str) -> bool:
        """Replace the input buffer. Refused while a reply is streaming."""
        if self.streaming:
            return False
        self.input_buffer = text
        return True

    def submit(self) -> Action:
        """Interpret the input buffer as a command or a new turn."""
        if self.streaming:
            return Action.NONE
        text = self.input_buffer.strip()
        if not text:
            return Action.NONE

        if text in QUIT_COMMANDS:
            return Action.QUIT
        if text == CLEAR_COMMAND:
            self.clear()
            return Action.CLEAR

        self.start_turn(text)
        return Action.START_TURN

    def start_turn(self, content: str) -> None:
        self.messages.append(DisplayMessage(role="user", raw_content=content))
        self.history.append(ChatMessage(role="user", content=content))
        self.input_buffer = ""
        self.streaming = True
        self.stream_accumulator = ""
        self.last_error = None
        self.finish_reason = None

    def snapshot(self) -> list[ChatMessage]:
        """Copy of the history for the stream task; later mutations do not leak into it."""
        return list(self.history)

    def clear(self) -> None:
        self.history.clear()
        self.messages.clear()
        self.input_buffer = ""
        self.last_error = None
        self.finish_reason = None

    def apply_delta(self, text: str) -> bool:
        if not self.streaming:
            return False
        self.stream_accumulator += text
        return True

    def finish(self, error: BaseException | None = None, finish_reason: str | None = None) -> None:
        """Commit the streamed reply and leave the streaming state.

        A partial reply is kept even when the stream failed. The error text is
        displayed but never added to the history sent to the server.
        """
        content = self.stream_accumulator
        if error is None or content:
            self._commit_assistant(content)
        if error is not None:
            message = str(error) or type(error).__name__
            self.messages.append(DisplayMessage(role="error", raw_content=message))
            self.last_error = message
        self.finish_reason = finish_reason
        self.stream_accumulator = ""
        self.streaming = False

    def _commit_assistant(self, content: str) -> None:
        self.messages.append(DisplayMessage(
            role="assistant",
            raw_content=content,
            rendered_content=self._render(content),
        ))
        self.history.append(ChatMessage(role="assistant", content=content))

    def resize(self, width: int, height: int) -> None:
        """Record the new terminal size and re-render assistant turns from raw text."""
        width_changed = width != self.width
        self.width = width
        self.height = height
        if width_changed:
            for message in self.messages:
                if message.role == "assistant":
                    message.rendered_content = self._render(message.raw_content)

    def _render(self, content: str) -> str:
        return self._renderer(content, self.content_width)

    @property
    def content_width(self) -> int:
        """Width available to message bodies (terminal width minus margin)."""
        return max(self.width - 2, 1)

    @property
    def status(self) -> str:
        """Status bar text: Ready, Generating... or the last error."""
        if self.streaming:
            return "Generating..."
        if self.last_error:
            return self.last_error
        if self.finish_reason and self.finish_reason != "stop":
            return f"Ready ({self.finish_reason})"
        return "Ready"
