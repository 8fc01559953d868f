"""Callback interface between the stream task and the UI loop.

Hides how stream progress reaches the UI: the stream task only calls
delta()/done()/debug(); the relay turns those into session events and posts
them through whatever channel the UI provides (a Textual message queue or an
asyncio.Queue). Uses thread-safe posting when called from another thread.
"""

import threading
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ..chat.events import Event, StreamDelta, StreamDone
from .config import LOG_TIMESTAMP_FORMAT, LogLevel

if TYPE_CHECKING:
    from rich.console import Console
    from textual.app import App

    from ..hivemind.models import StreamResult

DebugSink = Callable[[str, str, str], None]


class StreamRelay:
    """Posts StreamDelta/StreamDone events for one turn, in order."""

    def __init__(
        self,
        post: Callable[[Event], Any],
        app: "App | None" = None,
        debug_sink: DebugSink | None = None,
    ) -> None:
        self._post = post
        self.app = app
        self._debug_sink = debug_sink
        self._finished = False

    def _call_thread_safe(self, func: Any, *args: Any) -> None:
        """Call a function in a thread-safe manner for UI updates."""
        if self.app is not None and self.app._thread_id != threading.get_ident():
            self.app.call_from_thread(func, *args)
        else:
            func(*args)

    @property
    def finished(self) -> bool:
        return self._finished

    def delta(self, text: str) -> None:
        """Forward one content fragment. Ignored once the turn is done."""
        if self._finished:
            return
        self._call_thread_safe(self._post, StreamDelta(text))

    def done(
        self,
        error: BaseException | None = None,
        result: "StreamResult | None" = None,
    ) -> None:
        """Post the terminal event of the turn. Only the first call has an effect."""
        if self._finished:
            return
        self._finished = True
        self._call_thread_safe(self._post, StreamDone(error=error, result=result))

    def debug(self, level: str, component: str, message: str) -> None:
        if self._debug_sink is not None:
            self._call_thread_safe(self._debug_sink, level, component, message)


def console_debug_sink(console: "Console", log_level: str | None) -> DebugSink | None:
    """Build a trace sink that prints dim lines to `console` at or above `log_level`.

    Returns None when tracing is off.
    """
    if log_level is None:
        return None
    threshold = LogLevel.from_string(log_level)

    def sink(level: str, component: str, message: str) -> None:
        level_value = LogLevel.from_string(level)
        if level_value < threshold:
            return
        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        console.print(
            f"{timestamp} {LogLevel.name(level_value):<5} [{component}] {message}",
            style="dim",
            markup=False,
            highlight=False,
        )

    return sink
