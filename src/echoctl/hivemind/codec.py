"""Wire codec for the hivemind Chat Completions protocol.

Hides the JSON request layout and the SSE line framing from the client.
"""

from collections.abc import Iterable
from typing import Final

from pydantic import ValidationError

from .errors import RequestEncodeError
from .models import ChatChunk, ChatMessage, ChatRequest, ChatResponse

DATA_PREFIX: Final = "data: "
DONE_MARKER: Final = "[DONE]"


class _Done:
    """Sentinel returned by decode_line for the terminal `data: [DONE]` line."""

    def __repr__(self) -> str:
        return "STREAM_DONE"


STREAM_DONE: Final = _Done()


def encode_request(model: str, messages: Iterable[ChatMessage], stream: bool = True) -> bytes:
    """Serialize a chat request body.

    Raises:
        RequestEncodeError: If the request is invalid (empty model or no messages)
    """
    try:
        request = ChatRequest(model=model, messages=list(messages), stream=stream)
    except ValidationError as e:
        raise RequestEncodeError(f"marshal request: {e}") from e
    return request.model_dump_json().encode("utf-8")


def decode_request(body: bytes | str) -> ChatRequest:
    """Parse a request body back into a ChatRequest."""
    return ChatRequest.model_validate_json(body)


def decode_line(line: str) -> ChatChunk | _Done | None:
    """Decode one line of an SSE response body.

    Returns:
        STREAM_DONE for the terminal marker, a ChatChunk for a valid data line,
        or None for lines that carry nothing (blank, comments, other fields,
        malformed JSON).
    """
    if not line.startswith(DATA_PREFIX):
        return None
    data = line[len(DATA_PREFIX):]
    if data == DONE_MARKER:
        return STREAM_DONE
    try:
        return ChatChunk.model_validate_json(data)
    except ValidationError:
        return None


def decode_response(body: bytes | str) -> ChatResponse:
    """Parse a non-streaming response body."""
    return ChatResponse.model_validate_json(body)
