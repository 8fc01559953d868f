"""Pytest configuration and shared fixtures."""
import json
from collections.abc import Callable

import httpx
import pytest

from echoctl.hivemind import ChatClient, EndpointConfig, HivemindClient
from echoctl.hivemind.models import StreamResult


def sse_chunk(content: str | None = None, finish_reason: str | None = None, chunk_id: str = "chatcmpl-1") -> str:
    """Build one `data: {...}` line carrying a delta."""
    delta = {} if content is None else {"content": content}
    payload = {"id": chunk_id, "choices": [{"delta": delta, "finish_reason": finish_reason}]}
    return "data: " + json.dumps(payload)


def sse_body(*contents: str, done: bool = True, finish_reason: str | None = "stop") -> str:
    """Build a full SSE body from content fragments."""
    lines = [sse_chunk(content) for content in contents]
    if finish_reason is not None:
        lines.append(sse_chunk(None, finish_reason))
    if done:
        lines.append("data: [DONE]")
    return "\n\n".join(lines) + "\n\n"


class RecordingHandler:
    """MockTransport handler that records requests and replays a canned response."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self._respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def endpoint_config() -> EndpointConfig:
    """Return a config pointing at a fake server."""
    return EndpointConfig(base_url="http://hivemind.test", session_key="sess-1", model="Echoryn", timeout=5)


@pytest.fixture
def make_client(endpoint_config):
    """Return a factory building a HivemindClient backed by an httpx MockTransport."""
    def _make(respond, config: EndpointConfig | None = None, **kwargs):
        handler = respond if isinstance(respond, RecordingHandler) else RecordingHandler(respond)
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = HivemindClient(config or endpoint_config, http_client=http, **kwargs)
        return client, handler

    return _make


class FakeChatClient(ChatClient):
    """In-memory ChatClient that streams scripted replies."""

    def __init__(self, replies: list[str] | None = None, error: Exception | None = None,
                 finish_reason: str | None = "stop"):
        self.replies = list(replies or [])
        self.error = error
        self.finish_reason = finish_reason
        self.calls: list[list] = []
        self.closed = False
        self.debug_callback = None

    @property
    def model(self) -> str:
        return "Echoryn"

    @property
    def session_key(self) -> str:
        return "echo-Echoryn-1"

    @property
    def base_url(self) -> str:
        return "http://hivemind.test"

    def set_debug_callback(self, callback) -> None:
        self.debug_callback = callback

    async def chat_stream(self, messages, on_delta=None):
        self.calls.append(list(messages))
        reply = self.replies.pop(0) if self.replies else ""
        fragments = reply.split(" ")
        sent = []
        for index, word in enumerate(fragments):
            piece = word if index == 0 else " " + word
            if not piece:
                continue
            sent.append(piece)
            if on_delta is not None:
                on_delta(piece)
        if self.error is not None:
            raise self.error
        return StreamResult(content="".join(sent), finish_reason=self.finish_reason, chunks=len(sent))

    async def chat(self, messages):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client() -> Callable[..., FakeChatClient]:
    """Return a factory for scripted in-memory chat clients."""
    return FakeChatClient
