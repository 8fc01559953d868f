"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console

from .. import __version__
from ..chat.oneshot import ask_once, run_once
from ..hivemind import HivemindError
from ..ui.callbacks import console_debug_sink
from ..ui.config import LogLevel
from .providers import get_client

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="echoctl",
    help="Streaming chat client for hivemind servers",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"echoctl {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit"
    ),
):
    """Chat with a hivemind server from the terminal."""


@app.command()
def version():
    """Show the echoctl version."""
    typer.echo(f"echoctl {__version__}")


@app.command()
def chat(
    message: list[str] | None = typer.Argument(
        None,
        help="Message to send once; omit to start an interactive session"
    ),
    server: str | None = typer.Option(
        None,
        "--server",
        "--server-addr",
        "-s",
        help="Server base URL (default: $ECHOCTL_SERVER or http://localhost:11789)"
    ),
    session: str | None = typer.Option(
        None,
        "--session",
        help="Session key sent as X-Session-Key (default: auto-generated)"
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name (default: $ECHOCTL_MODEL or Echoryn)"
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Per-request deadline in seconds (default: 120)"
    ),
    inline: bool = typer.Option(
        False,
        "--inline",
        help="Print into the terminal scrollback instead of a full-screen view"
    ),
    no_stream: bool = typer.Option(
        False,
        "--no-stream",
        help="One-shot only: wait for the whole reply instead of streaming it"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show trace messages with level: debug (all), info, warning, or error"
    ),
):
    """Send one message, or start an interactive chat session."""
    if log_level is not None and log_level.lower() not in LogLevel.choices():
        err_console.print(
            f"[red]Error: invalid log level '{log_level}' "
            f"(choose from {', '.join(LogLevel.choices())})[/red]"
        )
        raise typer.Exit(code=1)

    text = " ".join(message or [])

    if text:
        code = _run(_oneshot(text, server, session, model, timeout, no_stream, log_level))
    else:
        code = _run(_interactive(server, session, model, timeout, inline, log_level))
    if code:
        raise typer.Exit(code=code)


def _run(coro) -> int:
    """Run a command coroutine; Ctrl-C ends it cleanly."""
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[dim]Goodbye![/dim]")
        return 0


async def _oneshot(
    text: str,
    server: str | None,
    session: str | None,
    model: str | None,
    timeout: float | None,
    no_stream: bool,
    log_level: str | None,
) -> int:
    client = get_client(
        server, session, model, timeout,
        debug_callback=console_debug_sink(err_console, log_level),
        console=err_console,
    )
    try:
        if no_stream:
            reply = await ask_once(client, text)
            typer.echo(reply)
        else:
            await run_once(client, text, out=lambda delta: typer.echo(delta, nl=False))
        return 0
    except HivemindError as e:
        err_console.print(f"Error: {e}", style="red", markup=False, highlight=False)
        return 1
    finally:
        await client.close()


async def _interactive(
    server: str | None,
    session: str | None,
    model: str | None,
    timeout: float | None,
    inline: bool,
    log_level: str | None,
) -> int:
    if inline:
        from ..ui.inline import run_inline

        client = get_client(server, session, model, timeout, console=err_console)
        try:
            await run_inline(client, console=console, debug_sink=console_debug_sink(err_console, log_level))
        finally:
            await client.close()
        return 0

    from ..ui.app import run_textual_tui

    client = get_client(server, session, model, timeout, console=err_console)
    try:
        await run_textual_tui(client, log_level=log_level)
    finally:
        await client.close()
        console.print("\n[dim]Goodbye![/dim]")
    return 0


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
