from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant", "system"]


class ChatMessage(BaseModel):
    """Represents a chat message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")


class ChatRequest(BaseModel):
    """Request body for /v1/chat/completions."""

    model_config = ConfigDict(frozen=True)

    model: str = Field(min_length=1, description="Model name passed through to the server")
    messages: list[ChatMessage] = Field(min_length=1, description="Conversation history")
    stream: bool = Field(default=True, description="Ask the server for an SSE delta stream")


class ChunkDelta(BaseModel):
    """Incremental content carried by a streaming choice."""

    role: str | None = None
    content: str | None = None


class ChunkChoice(BaseModel):
    """A single choice inside a streaming chunk."""

    delta: ChunkDelta | None = None
    finish_reason: str | None = None


class ChatChunk(BaseModel):
    """A single SSE streaming chunk.

    Unknown fields sent by the server (object, created, usage, ...) are ignored.
    """

    id: str = ""
    choices: list[ChunkChoice] = Field(default_factory=list)

    def deltas(self) -> list[str]:
        """Return the non-empty content fragments of this chunk, in choice order."""
        return [
            choice.delta.content
            for choice in self.choices
            if choice.delta is not None and choice.delta.content
        ]

    def finish_reason(self) -> str | None:
        """Return the last finish reason reported by any choice."""
        reason = None
        for choice in self.choices:
            if choice.finish_reason:
                reason = choice.finish_reason
        return reason


class ResponseChoice(BaseModel):
    message: ChatMessage | None = None
    finish_reason: str | None = None


class ResponseError(BaseModel):
    message: str = ""
    type: str = ""


class ChatResponse(BaseModel):
    """Non-streaming response body."""

    id: str = ""
    choices: list[ResponseChoice] = Field(default_factory=list)
    error: ResponseError | None = None


class StreamResult(BaseModel):
    """Outcome of a completed streaming request."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(default="", description="Concatenation of every delta, in order")
    finish_reason: str | None = Field(
        default=None,
        description="Last finish reason reported by the server, informational only"
    )
    chunks: int = Field(default=0, description="Number of valid chunks decoded")
