"""Events accepted by the chat session.

UI input (edits, submits, resizes) and stream progress (deltas, completion)
arrive through the same event types so a single loop can apply them in order.
"""

from dataclasses import dataclass

from ..hivemind.models import StreamResult


@dataclass(frozen=True)
class Edit:
    """The input buffer now holds `text`."""

    text: str


@dataclass(frozen=True)
class Submit:
    """Enter was pressed on the current input buffer."""


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class StreamDelta:
    text: str


@dataclass(frozen=True)
class StreamDone:
    """The in-flight stream finished; `error` is set when it failed."""

    error: BaseException | None = None
    result: StreamResult | None = None


@dataclass(frozen=True)
class Quit:
    pass


Event = Edit | Submit | Resize | StreamDelta | StreamDone | Quit
