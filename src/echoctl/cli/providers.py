"""Client factory functions for CLI.

Centralizes creation of the hivemind client from flags and environment
variables. Hides configuration details from command implementations.
"""

import os

import typer
from pydantic import ValidationError
from rich.console import Console

from ..hivemind import EndpointConfig, HivemindClient
from ..hivemind.base import DebugCallback
from ..hivemind.config import DEFAULT_MODEL, DEFAULT_SERVER, DEFAULT_TIMEOUT

# Default console for output
_console = Console(stderr=True)


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"]) or "config"
        parts.append(f"{field}: {item['msg']}")
    return "; ".join(parts)


def get_config(
    server: str | None = None,
    session: str | None = None,
    model: str | None = None,
    timeout: float | None = None,
    console: Console | None = None,
) -> EndpointConfig:
    """Build the endpoint configuration.

    Flag values win over environment variables, which win over defaults.

    Raises:
        typer.Exit: If the resulting configuration is invalid

    Environment variables:
        ECHOCTL_SERVER: Server base URL (default: http://localhost:11789)
        ECHOCTL_SESSION: Session key (default: auto-generated)
        ECHOCTL_MODEL: Model name (default: Echoryn)
        ECHOCTL_TIMEOUT: Per-request deadline in seconds (default: 120)
    """
    con = console or _console
    try:
        if timeout is None:
            timeout = float(os.getenv("ECHOCTL_TIMEOUT", str(DEFAULT_TIMEOUT)))
        return EndpointConfig(
            base_url=server if server is not None else os.getenv("ECHOCTL_SERVER", DEFAULT_SERVER),
            session_key=session if session is not None else os.getenv("ECHOCTL_SESSION", ""),
            model=model if model is not None else os.getenv("ECHOCTL_MODEL", DEFAULT_MODEL),
            timeout=timeout,
        )
    except ValidationError as e:
        con.print(f"[red]Error: invalid configuration: {_format_validation_error(e)}[/red]")
        raise typer.Exit(code=1) from e
    except ValueError as e:
        con.print(f"[red]Error: invalid configuration: {e}[/red]")
        raise typer.Exit(code=1) from e


def get_client(
    server: str | None = None,
    session: str | None = None,
    model: str | None = None,
    timeout: float | None = None,
    debug_callback: DebugCallback | None = None,
    console: Console | None = None,
) -> HivemindClient:
    """Create the hivemind client from flags and environment variables.

    Returns:
        Client sharing one HTTP connection pool across turns
    """
    config = get_config(server, session, model, timeout, console)
    return HivemindClient(config, debug_callback=debug_callback)
