import asyncio
from typing import TYPE_CHECKING

from ..hivemind.base import ChatClient
from ..hivemind.errors import HivemindError, StreamInterruptedError
from ..hivemind.models import ChatMessage

if TYPE_CHECKING:
    from ..ui.callbacks import StreamRelay


async def run_turn(client: ChatClient, messages: list[ChatMessage], relay: "StreamRelay") -> None:
    """Stream one assistant reply into the UI loop.

    Deltas are relayed in arrival order and StreamDone is always the last event
    of the turn, including on failure and cancellation. The task never touches
    session state itself.
    """
    try:
        result = await client.chat_stream(messages, on_delta=relay.delta)
    except asyncio.CancelledError:
        relay.done(error=StreamInterruptedError("request cancelled"))
        raise
    except HivemindError as e:
        relay.done(error=e)
    except Exception as e:
        relay.debug("error", "Stream", f"Unexpected {type(e).__name__}: {e}")
        relay.done(error=e)
    else:
        relay.done(result=result)
