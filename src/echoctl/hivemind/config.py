import re
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_SERVER = "http://localhost:11789"
DEFAULT_MODEL = "Echoryn"
DEFAULT_TIMEOUT = 120.0

_SCHEMES = ("http", "https")
_SCHEME_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*)://")


def normalize_base_url(url: str) -> str:
    """Give a server address exactly one scheme and no trailing slash.

    >>> normalize_base_url("localhost:11789//")
    'http://localhost:11789'

    Raises:
        ValueError: If the scheme is not http or https, or the host is empty
    """
    url = url.strip()
    match = _SCHEME_PATTERN.match(url)
    if match is None:
        url = "http://" + url
    elif match.group(1).lower() not in _SCHEMES:
        raise ValueError(f"unsupported scheme '{match.group(1)}' (use http or https)")
    url = url.rstrip("/")
    _, _, host = url.partition("://")
    if not host:
        raise ValueError("server address must include a host")
    return url


def generate_session_key(model: str) -> str:
    """Build a fresh session key of the form echo-{model}-{nanoseconds}."""
    return f"echo-{model}-{time.time_ns()}"


class EndpointConfig(BaseModel):
    """Connection settings for a hivemind server, captured once at startup."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(default=DEFAULT_SERVER, description="Normalized server base URL")
    session_key: str = Field(default="", description="Value of the X-Session-Key header")
    model: str = Field(default=DEFAULT_MODEL, min_length=1, description="Model name")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Per-request deadline in seconds")

    @field_validator("base_url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        return normalize_base_url(value)

    @model_validator(mode="before")
    @classmethod
    def _default_session_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("session_key"):
            model = data.get("model") or DEFAULT_MODEL
            data = {**data, "session_key": generate_session_key(model)}
        return data

    @property
    def completions_url(self) -> str:
        return f"{self.base_url}/v1/chat/completions"
