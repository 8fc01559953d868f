from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from .models import ChatMessage, StreamResult

DeltaCallback = Callable[[str], None]
DebugCallback = Callable[[str, str, str], None]


class ChatClient(ABC):
    """Abstract base class for chat servers.

    This module hides the design decision of how a conversation reaches the
    server. Implementations must handle:
    - Request encoding and transport
    - Stream framing and delta extraction
    - Mapping transport failures onto HivemindError subclasses

    Supports async context manager protocol for proper resource cleanup:
        async with client:
            result = await client.chat_stream(messages, on_delta=print)
    """

    @property
    @abstractmethod
    def model(self) -> str:
        """Model name sent with every request."""

    @property
    @abstractmethod
    def session_key(self) -> str:
        """Session key forwarded to the server ("" when none)."""

    @property
    @abstractmethod
    def base_url(self) -> str:
        """Normalized server base URL."""

    @abstractmethod
    async def chat_stream(
        self,
        messages: list[ChatMessage],
        on_delta: DeltaCallback | None = None,
    ) -> StreamResult:
        """Send the conversation and stream the reply.

        Args:
            messages: Non-empty conversation history
            on_delta: Called once per content fragment, in arrival order

        Returns:
            StreamResult with the concatenated reply

        Raises:
            HivemindError: On any failure. StreamInterruptedError carries the
                partial reply in its `partial` attribute.
        """
        pass

    @abstractmethod
    async def chat(self, messages: list[ChatMessage]) -> str:
        """Send the conversation and wait for the whole reply."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""
        pass

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
