"""Command-line interface for echoctl."""

from .app import main

__all__ = ["main"]
