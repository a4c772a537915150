"""Streaming chat relay for Anthropic, OpenAI and Together models.

This package provides a FastAPI application factory named ``create_app``
inside ``chat_relay/server.py`` (see :func:`create_app`), and the
:class:`~chat_relay.relay.StreamingRelay` it serves.

Typical usage
-------------
from chat_relay import create_app
app = create_app()

or, from the provided launcher:

python scripts/run_server.py --host 127.0.0.1 --port 8000
"""

from __future__ import annotations

from .formatter import build_messages, build_messages_with_agents
from .providers import ProviderClients
from .relay import StreamingRelay
from .server import create_app
from .types import AgentResponse, Message, StreamFrame

__all__ = [
    "AgentResponse",
    "Message",
    "ProviderClients",
    "StreamFrame",
    "StreamingRelay",
    "build_messages",
    "build_messages_with_agents",
    "create_app",
    "__version__",
    "get_version",
]

# ---------------------------------------------------------------------
# Version handling
# ---------------------------------------------------------------------
__version__ = "0.1.0"


def get_version() -> str:
    """Return the package version."""
    return __version__
