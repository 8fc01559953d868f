from .base import ChatClient, DebugCallback, DeltaCallback
from .client import HivemindClient
from .config import EndpointConfig, generate_session_key, normalize_base_url
from .errors import (
    ConnectionFailedError,
    EmptyResponseError,
    HivemindError,
    RequestEncodeError,
    ServerReportedError,
    ServerStatusError,
    StreamInterruptedError,
    StreamTimeoutError,
)
from .models import ChatMessage, ChatRequest, StreamResult

__all__ = [
    "ChatClient",
    "ChatMessage",
    "ChatRequest",
    "ConnectionFailedError",
    "DebugCallback",
    "DeltaCallback",
    "EmptyResponseError",
    "EndpointConfig",
    "HivemindClient",
    "HivemindError",
    "RequestEncodeError",
    "ServerReportedError",
    "ServerStatusError",
    "StreamInterruptedError",
    "StreamResult",
    "StreamTimeoutError",
    "generate_session_key",
    "normalize_base_url",
]
