"""Custom Textual widgets for the chat TUI.

Hides widget implementation details:
- Scrollback rendering (banner, committed turns, live stream)
- Status bar and help line drawing
- Input history management
- Trace log rendering and filtering
"""

from datetime import datetime

from rich.markup import escape
from textual import events
from textual.containers import VerticalScroll
from textual.widgets import Input, RichLog, Static

from ..chat.session import ChatSession
from .config import LOG_TIMESTAMP_FORMAT, LogLevel
from .formatting import (
    HELP_TEXT,
    build_status_bar,
    build_welcome_banner,
    render_message,
    render_streaming,
)
from .models import DisplayMessage


class MessageView(Static):
    """One committed scrollback entry."""

    def __init__(self, message: DisplayMessage, width: int, **kwargs) -> None:
        super().__init__(render_message(message, width), **kwargs)
        self.message = message

    def refresh_content(self, width: int) -> None:
        """Redraw from the message (after a resize re-rendered it)."""
        self.update(render_message(self.message, width))


class ScrollbackView(VerticalScroll):
    """Welcome banner, past turns and the in-progress reply."""

    def __init__(self, banner: Static, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._banner = banner
        self._live = Static("", id="stream-view")
        self._views: list[MessageView] = []

    def compose(self):
        yield self._banner
        yield self._live

    def on_mount(self) -> None:
        self._live.display = False

    @property
    def message_views(self) -> list[MessageView]:
        return list(self._views)

    def sync(self, session: ChatSession, spinner: str) -> None:
        """Bring the widgets in line with the session's displayed messages."""
        if len(self._views) > len(session.messages):
            self.clear_messages()

        new_views = [
            MessageView(message, session.width, classes=f"chat-message {message.role}-message")
            for message in session.messages[len(self._views):]
        ]
        if new_views:
            self._views.extend(new_views)
            self.mount(*new_views, before=self._live)

        if session.streaming:
            self._live.update(render_streaming(session.stream_accumulator, spinner))
            self._live.display = True
        else:
            self._live.update("")
            self._live.display = False

        if new_views or session.streaming:
            self.scroll_end(animate=False)

    def rerender(self, width: int) -> None:
        for view in self._views:
            view.refresh_content(width)

    def clear_messages(self) -> None:
        """Remove every turn, leaving only the welcome banner."""
        for view in self._views:
            view.remove()
        self._views.clear()


class StatusBar(Static):
    """Powerline status line: model, session, status, message count."""

    def show_session(self, session: ChatSession, spinner: str = "") -> None:
        if session.streaming:
            state = "busy"
        elif session.last_error:
            state = "error"
        else:
            state = "ready"
        self.update(build_status_bar(
            model=session.model,
            session_key=session.session_key,
            status=session.status,
            message_count=len(session.messages),
            width=self.size.width or session.width,
            spinner=spinner,
            state=state,
        ))


class HelpLine(Static):
    """Key hints under the prompt."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(HELP_TEXT, *args, **kwargs)


class PromptInput(Input):
    """Chat prompt that recalls previously sent messages.

    Up/Down walk through sent messages, oldest at the top; stepping past the
    newest one restores the draft that was being typed. Recall is disabled
    while `locked` is set (a reply is streaming and the buffer is frozen).
    Pasted newlines collapse to spaces since a turn is a single line.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.locked = False
        self._sent: list[str] = []
        self._position: int | None = None
        self._draft = ""

    def _on_paste(self, event: events.Paste) -> None:
        if event.text:
            self.insert_text_at_cursor(" ".join(event.text.split()))
            event.prevent_default()
            event.stop()

    def _on_key(self, event: events.Key) -> None:
        if event.key not in ("up", "down"):
            return
        event.prevent_default()
        event.stop()
        if self.locked or not self._sent:
            return
        if event.key == "up":
            self._recall_older()
        else:
            self._recall_newer()

    def _recall_older(self) -> None:
        if self._position is None:
            self._draft = self.value
            self._position = len(self._sent) - 1
        elif self._position > 0:
            self._position -= 1
        self._show(self._sent[self._position])

    def _recall_newer(self) -> None:
        if self._position is None:
            return
        if self._position < len(self._sent) - 1:
            self._position += 1
            self._show(self._sent[self._position])
        else:
            self._position = None
            self._show(self._draft)

    def _show(self, text: str) -> None:
        self.value = text
        self.cursor_position = len(text)

    def remember(self, message: str) -> None:
        """Record a sent message; consecutive repeats are stored once."""
        if message and (not self._sent or self._sent[-1] != message):
            self._sent.append(message)
        self._position = None
        self._draft = ""

    @property
    def history(self) -> list[str]:
        return list(self._sent)


class DebugPanel(RichLog):
    """Log panel for request tracing with level filtering.

    Shows timestamped log messages from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level
        self.display = False

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def log(
        self,
        component: str,
        message: str,
        level: int = LogLevel.DEBUG
    ) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Component name (TUI, HTTP, Stream)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        component_colors = {
            "TUI": "cyan",
            "HTTP": "magenta",
            "Stream": "bright_yellow",
        }
        level_color = level_colors.get(level, "white")
        comp_color = component_colors.get(component, "white")
        level_name = LogLevel.name(level)

        self.write(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{level_name:<5}[/] "
            f"[{comp_color}]\\[{component}][/] {escape(message)}"
        )

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True


def make_banner(session: ChatSession, version: str) -> Static:
    return Static(
        build_welcome_banner(session.model, session.endpoint, session.session_key, version),
        id="welcome-banner",
    )
