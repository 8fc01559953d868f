"""Error types raised by the hivemind client.

Every error's string form is the message shown to the user.
"""

MAX_ERROR_BODY_LENGTH = 1024


class HivemindError(Exception):
    """Base class for all client-side chat failures."""


class RequestEncodeError(HivemindError):
    """The request body could not be built."""


class ConnectionFailedError(HivemindError):
    """The request never reached a response (refused, DNS, TLS, reset)."""


class ServerStatusError(HivemindError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, body: str) -> None:
        if len(body) > MAX_ERROR_BODY_LENGTH:
            body = body[:MAX_ERROR_BODY_LENGTH] + "..."
        self.status = status
        self.body = body
        super().__init__(f"server returned {status}: {body}")


class ServerReportedError(HivemindError):
    """A non-streaming body carried an error object."""


class EmptyResponseError(HivemindError):
    """A non-streaming body carried no message."""


class StreamInterruptedError(HivemindError):
    """The stream failed after it started; `partial` holds what arrived."""

    def __init__(self, message: str, partial: str = "") -> None:
        super().__init__(message)
        self.partial = partial


class StreamTimeoutError(StreamInterruptedError):
    """The per-turn deadline elapsed."""
