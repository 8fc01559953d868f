"""
echoctl: a terminal chat client for hivemind servers.

Speaks the OpenAI-style /v1/chat/completions protocol with SSE streaming,
either one-shot from the command line or as an interactive session.
"""

__version__ = "0.1.0"
