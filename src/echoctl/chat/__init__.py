"""Chat drivers: one-shot requests and the interactive session model."""

from .events import Edit, Event, Quit, Resize, StreamDelta, StreamDone, Submit
from .oneshot import ask_once, run_once
from .session import Action, ChatSession
from .stream import run_turn

__all__ = [
    "Action",
    "ChatSession",
    "Edit",
    "Event",
    "Quit",
    "Resize",
    "StreamDelta",
    "StreamDone",
    "Submit",
    "ask_once",
    "run_once",
    "run_turn",
]
