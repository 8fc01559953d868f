"""Data models for the TUI.

Hides the internal representation of displayed messages.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class DisplayMessage:
    """A message shown in the scrollback.

    `rendered_content` holds the Markdown-to-ANSI render of an assistant turn
    at the current width; it stays None for user and error entries.
    """

    role: str  # "user", "assistant" or "error"
    raw_content: str
    rendered_content: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)
