import asyncio

import httpx
from pydantic import ValidationError

from .base import ChatClient, DebugCallback, DeltaCallback
from .codec import DATA_PREFIX, STREAM_DONE, decode_line, decode_response, encode_request
from .config import EndpointConfig
from .errors import (
    ConnectionFailedError,
    EmptyResponseError,
    HivemindError,
    ServerReportedError,
    ServerStatusError,
    StreamInterruptedError,
    StreamTimeoutError,
)
from .models import ChatMessage, StreamResult

SESSION_HEADER = "X-Session-Key"


def _describe(error: BaseException) -> str:
    """Human-readable text for transport errors, some of which have no message."""
    return str(error) or type(error).__name__


class HivemindClient(ChatClient):
    """HTTP client for the hivemind /v1/chat/completions endpoint.

    Hidden design decisions:
    - One shared httpx.AsyncClient (connection reuse across turns)
    - SSE line framing and [DONE] handling
    - Wall-clock deadline per request via asyncio.timeout
    - Mapping of httpx failures onto HivemindError subclasses
    """

    def __init__(
        self,
        config: EndpointConfig,
        http_client: httpx.AsyncClient | None = None,
        debug_callback: DebugCallback | None = None,
    ):
        """Initialize the client.

        Args:
            config: Endpoint settings (URL, session key, model, timeout)
            http_client: Optional preconfigured client, e.g. with a mock transport.
                A client passed in is not closed by close().
            debug_callback: Optional (level, component, message) trace sink
        """
        self._config = config
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(config.timeout))
        self._debug_callback = debug_callback

    @property
    def config(self) -> EndpointConfig:
        return self._config

    @property
    def model(self) -> str:
        return self._config.model

    @property
    def session_key(self) -> str:
        return self._config.session_key

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Route trace messages to a new sink (e.g. the TUI log panel)."""
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback is not None:
            self._debug_callback(level, "HTTP", message)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.session_key:
            headers[SESSION_HEADER] = self._config.session_key
        return headers

    async def chat_stream(
        self,
        messages: list[ChatMessage],
        on_delta: DeltaCallback | None = None,
    ) -> StreamResult:
        """Stream a reply from the server.

        The whole exchange, including reading the body, is bounded by the
        configured timeout. Leaving the response context closes the connection
        on every path (done, error, timeout, cancellation).
        """
        body = encode_request(self.model, messages, stream=True)
        url = self._config.completions_url
        parts: list[str] = []
        finish_reason: str | None = None
        chunks = 0
        streaming = False

        self._debug("info", f"POST {url} ({len(messages)} messages, stream)")
        try:
            async with asyncio.timeout(self._config.timeout):
                async with self._http.stream("POST", url, content=body, headers=self._headers()) as response:
                    if not response.is_success:
                        raw = await response.aread()
                        self._debug("error", f"Status {response.status_code}")
                        raise ServerStatusError(
                            response.status_code, raw.decode("utf-8", errors="replace")
                        )
                    streaming = True
                    self._debug("debug", f"Status {response.status_code}, reading stream")

                    async for line in response.aiter_lines():
                        decoded = decode_line(line)
                        if decoded is STREAM_DONE:
                            self._debug("debug", "Received [DONE]")
                            break
                        if decoded is None:
                            if line.startswith(DATA_PREFIX):
                                self._debug("warning", f"Skipped malformed chunk: {line[:80]!r}")
                            continue
                        chunks += 1
                        finish_reason = decoded.finish_reason() or finish_reason
                        for delta in decoded.deltas():
                            parts.append(delta)
                            if on_delta is not None:
                                on_delta(delta)
        except TimeoutError as e:
            self._debug("error", f"Timed out after {self._config.timeout:g}s")
            raise StreamTimeoutError(
                f"request timed out after {self._config.timeout:g}s", partial="".join(parts)
            ) from e
        except httpx.TimeoutException as e:
            self._debug("error", f"{type(e).__name__}: {_describe(e)}")
            raise StreamTimeoutError(
                f"request timed out after {self._config.timeout:g}s", partial="".join(parts)
            ) from e
        except httpx.HTTPError as e:
            self._debug("error", f"{type(e).__name__}: {_describe(e)}")
            if streaming:
                raise StreamInterruptedError(
                    f"read stream: {_describe(e)}", partial="".join(parts)
                ) from e
            raise ConnectionFailedError(f"http request: {_describe(e)}") from e

        if finish_reason:
            self._debug("info", f"Finish reason: {finish_reason}")
        self._debug("info", f"Stream complete: {chunks} chunks, {sum(map(len, parts))} chars")
        return StreamResult(content="".join(parts), finish_reason=finish_reason, chunks=chunks)

    async def chat(self, messages: list[ChatMessage]) -> str:
        """Request a reply without streaming.

        A body carrying a non-empty error.message is a failure whatever the status.
        """
        body = encode_request(self.model, messages, stream=False)
        url = self._config.completions_url

        self._debug("info", f"POST {url} ({len(messages)} messages)")
        try:
            async with asyncio.timeout(self._config.timeout):
                response = await self._http.post(url, content=body, headers=self._headers())
        except (TimeoutError, httpx.TimeoutException) as e:
            raise StreamTimeoutError(f"request timed out after {self._config.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise ConnectionFailedError(f"http request: {_describe(e)}") from e

        self._debug("debug", f"Status {response.status_code}")
        try:
            parsed = decode_response(response.content)
        except ValidationError as e:
            if not response.is_success:
                raise ServerStatusError(response.status_code, response.text) from e
            raise HivemindError(f"unmarshal response: {e}") from e

        if parsed.error is not None and parsed.error.message:
            raise ServerReportedError(f"server error: {parsed.error.message}")
        if not response.is_success:
            raise ServerStatusError(response.status_code, response.text)
        if not parsed.choices or parsed.choices[0].message is None:
            raise EmptyResponseError("empty response from server")
        return parsed.choices[0].message.content

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()
