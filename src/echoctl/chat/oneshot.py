from collections.abc import Callable

from ..hivemind.base import ChatClient
from ..hivemind.models import ChatMessage, StreamResult


async def run_once(
    client: ChatClient,
    message: str,
    out: Callable[[str], None] | None = None,
) -> StreamResult:
    """Send a single user message and forward each delta to `out` verbatim.

    No buffering, no Markdown and no trailing newline: the server's last
    token decides how the output ends.

    Raises:
        HivemindError: If the request fails
    """
    messages = [ChatMessage(role="user", content=message)]
    return await client.chat_stream(messages, on_delta=out)


async def ask_once(client: ChatClient, message: str) -> str:
    """Send a single user message and return the whole reply without streaming."""
    return await client.chat([ChatMessage(role="user", content=message)])
