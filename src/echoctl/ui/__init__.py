"""Terminal UI module for echoctl.

Module structure (each module hides a design decision):
- models.py: Data structures (display message representation)
- formatting.py: Wrapping, Markdown rendering, status bar and banner layout
- widgets.py: Custom widgets (scrollback, status bar, prompt history, log panel)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- callbacks.py: Stream integration (how the UI receives stream events)
- app.py: Full-screen application orchestration
- inline.py: Inline renderer writing into the terminal scrollback

app.py and inline.py are imported by the CLI directly; importing them here
would pull Textual in for every consumer of the formatting helpers.
"""

from .callbacks import StreamRelay, console_debug_sink
from .config import LogLevel
from .formatting import count_display_lines, render_markdown, wrap_text
from .models import DisplayMessage

__all__ = [
    "DisplayMessage",
    "LogLevel",
    "StreamRelay",
    "console_debug_sink",
    "count_display_lines",
    "render_markdown",
    "wrap_text",
]
