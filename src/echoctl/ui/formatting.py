"""Text formatting utilities for the chat UI.

Hides the details of word wrapping, Markdown rendering, and how the status
bar, welcome banner and scrollback entries are drawn. Both renderers (the
full-screen app and the inline printer) build their output from here.
"""

import io
import math

from rich.cells import cell_len
from rich.console import Console, Group, RenderableType
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from .models import DisplayMessage

SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
POWERLINE_ARROW = "\ue0b0"
ELLIPSIS = "…"

TAB_SIZE = 8
SESSION_LABEL_LENGTH = 12
STATUS_ERROR_LENGTH = 40

USER_LABEL = "you"
ASSISTANT_LABEL = "assistant"

# Palette shared with the Textual theme
COLOR_USER = "#89b4fa"
COLOR_ASSISTANT = "#f5c2e7"
COLOR_ERROR = "#f38ba8"
COLOR_ACCENT = "#fab387"
COLOR_MUTED = "#6c7086"
COLOR_BAR = "#181825"

STATUS_COLORS = {
    "model": "#cba6f7",
    "session": "#89b4fa",
    "ready": "#a6e3a1",
    "busy": "#fab387",
    "error": "#f38ba8",
    "count": "#45475a",
}

HELP_TEXT = "Enter send  /clear reset  /quit exit  Ctrl+C quit  Up/Down history"


def _split_word(word: str, width: int) -> list[str]:
    """Break a word wider than `width` cells into pieces that fit."""
    pieces: list[str] = []
    current = ""
    for char in word:
        if current and cell_len(current + char) > width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def _wrap_line(line: str, width: int) -> list[str]:
    lines: list[str] = []
    current = ""
    for word in line.split():
        for piece in _split_word(word, width):
            if not current:
                current = piece
            elif cell_len(current) + 1 + cell_len(piece) <= width:
                current = f"{current} {piece}"
            else:
                lines.append(current)
                current = piece
    if current or not lines:
        lines.append(current)
    return lines


def wrap_text(text: str, width: int) -> str:
    """Word-wrap text to `width` display cells, breaking on whitespace.

    Lines that already fit pass through untouched, so wrapping is idempotent.
    Words wider than the limit are broken by cell width; wide glyphs count
    as two cells.
    """
    width = max(width, 1)
    wrapped: list[str] = []
    for line in text.split("\n"):
        if cell_len(line) <= width:
            wrapped.append(line)
        else:
            wrapped.extend(_wrap_line(line, width))
    return "\n".join(wrapped)


def count_display_lines(text: str, width: int) -> int:
    """Number of terminal rows `text` occupies when written raw at `width` columns.

    Tabs advance to the next multiple of TAB_SIZE columns, as terminals do.
    """
    width = max(width, 1)
    return sum(
        max(1, math.ceil(cell_len(line.expandtabs(TAB_SIZE)) / width))
        for line in text.split("\n")
    )


def truncate(text: str, limit: int) -> str:
    """Shorten text to `limit` characters plus an ellipsis."""
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def session_label(session_key: str) -> str:
    if not session_key:
        return "new"
    return truncate(session_key, SESSION_LABEL_LENGTH)


def render_markdown(raw: str, width: int) -> str:
    """Render Markdown to ANSI text at `width` columns.

    A pure function of (raw, width). Falls back to the raw text when
    rendering fails.
    """
    try:
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            width=max(width, 1),
            force_terminal=True,
            color_system="256",
            legacy_windows=False,
        )
        console.print(Markdown(raw))
        return buffer.getvalue().rstrip("\n")
    except Exception:
        return raw


def build_status_bar(
    model: str,
    session_key: str,
    status: str,
    message_count: int,
    width: int,
    spinner: str = "",
    state: str = "ready",
) -> Text:
    """Build the one-line powerline status bar, padded to `width` cells.

    Args:
        state: "ready", "busy" or "error"; picks the status segment color
    """
    if state == "busy":
        status_text = f"{spinner} {status}".strip()
    elif state == "error":
        status_text = truncate(status, STATUS_ERROR_LENGTH)
    else:
        status_text = status

    segments = [
        (model, STATUS_COLORS["model"]),
        (session_label(session_key), STATUS_COLORS["session"]),
        (status_text, STATUS_COLORS.get(state, STATUS_COLORS["ready"])),
        (f"{message_count} msgs", STATUS_COLORS["count"]),
    ]

    bar = Text(no_wrap=True, overflow="crop")
    for index, (label, background) in enumerate(segments):
        bar.append(f" {label} ", style=f"bold #11111b on {background}")
        next_background = segments[index + 1][1] if index + 1 < len(segments) else COLOR_BAR
        bar.append(POWERLINE_ARROW, style=f"{background} on {next_background}")

    padding = width - bar.cell_len
    if padding > 0:
        bar.append(" " * padding, style=f"on {COLOR_BAR}")
    else:
        bar.truncate(max(width, 0))
    return bar


def build_welcome_banner(model: str, server: str, session_key: str, version: str) -> Panel:
    """Bordered two-row welcome panel: title on top, tips and session info below."""
    title = Text.assemble(
        ("Echoryn Chat", f"bold {COLOR_ACCENT}"),
        " ",
        (f"v{version}", COLOR_MUTED),
    )

    tips = Text.assemble(
        ("Tips\n", f"bold {COLOR_ACCENT}"),
        "Type a message and press Enter to send\n",
        "/clear  reset conversation\n",
        "/quit   exit\n",
        "Ctrl+C  exit",
    )

    info = Table.grid(padding=(0, 1))
    info.add_column(style=f"bold {COLOR_MUTED}")
    info.add_column()
    info.add_row("Model", model)
    info.add_row("Server", server)
    info.add_row("Session", session_key or "new")

    body = Table.grid(expand=True, padding=(0, 2))
    body.add_column(ratio=1)
    body.add_column(ratio=1)
    body.add_row(tips, info)

    layout = Table.grid(expand=True)
    layout.add_row(title)
    layout.add_row(Rule(style=COLOR_MUTED))
    layout.add_row(body)
    return Panel(layout, border_style=COLOR_ACCENT, padding=(0, 1))


def _label(role: str) -> Text:
    if role == "user":
        return Text(USER_LABEL, style=f"bold {COLOR_USER}")
    return Text(ASSISTANT_LABEL, style=f"bold {COLOR_ASSISTANT}")


def render_message(message: DisplayMessage, width: int) -> RenderableType:
    """Render one scrollback entry, preceded by a horizontal rule."""
    rule = Rule(style=COLOR_MUTED)
    if message.role == "error":
        return Group(rule, Text(f"Error: {message.raw_content}", style=f"bold {COLOR_ERROR}"))
    if message.role == "assistant":
        body = message.rendered_content if message.rendered_content is not None else message.raw_content
        return Group(rule, _label("assistant"), Text.from_ansi(body))
    return Group(
        rule,
        _label("user"),
        Text(wrap_text(message.raw_content, width - 2), style=COLOR_USER),
    )


def render_streaming(accumulator: str, spinner: str) -> RenderableType:
    """Render the in-progress reply verbatim with a trailing spinner glyph."""
    body = Text(accumulator)
    body.append(f" {spinner}" if accumulator else spinner, style=COLOR_ACCENT)
    return Group(Rule(style=COLOR_MUTED), _label("assistant"), body)
