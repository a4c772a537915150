"""Provider client handles and per-provider stream adapters.

Each adapter turns one provider's streaming protocol into a sequence of
:class:`~chat_relay.types.StreamEvent` so the relay can frame them uniformly.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence

from .errors import ProviderNotConfiguredError, RelayError
from .models import ANTHROPIC, OPENAI, TOGETHER, ModelRoute
from .types import FormattedTurn, StreamEvent

logger = logging.getLogger("chat_relay.providers")

# Anthropic requires an explicit output ceiling on every call.
ANTHROPIC_MAX_TOKENS = 8192

# provider -> (display name used in errors, credential env var)
_CREDENTIALS: Dict[str, tuple] = {
    ANTHROPIC: ("Anthropic", "ANTHROPIC_API_KEY"),
    OPENAI: ("Open AI", "OPENAI_API_KEY"),
    TOGETHER: ("Together", "TOGETHER_API_KEY"),
}


# -----------------------------
# Client handles
# -----------------------------
@dataclass(frozen=True)
class ProviderClients:
    """Already-constructed SDK clients; ``None`` means the key was absent."""

    anthropic: Any = None
    openai: Any = None
    together: Any = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProviderClients":
        """Build a client for every provider whose API key is set."""
        env = os.environ if environ is None else environ
        anthropic_client = openai_client = together_client = None

        # Lazy imports keep SDK start-up cost off code paths that inject fakes.
        if env.get("ANTHROPIC_API_KEY"):
            from anthropic import AsyncAnthropic

            anthropic_client = AsyncAnthropic(api_key=env["ANTHROPIC_API_KEY"])
        if env.get("OPENAI_API_KEY"):
            from openai import AsyncOpenAI

            openai_client = AsyncOpenAI(api_key=env["OPENAI_API_KEY"])
        if env.get("TOGETHER_API_KEY"):
            from together import AsyncTogether

            together_client = AsyncTogether(api_key=env["TOGETHER_API_KEY"])

        clients = cls(anthropic_client, openai_client, together_client)
        logger.info("Provider clients configured: %s", clients.available())
        return clients

    def available(self) -> Dict[str, bool]:
        return {p: getattr(self, p) is not None for p in _CREDENTIALS}

    def require(self, provider: str) -> Any:
        """Return the client for ``provider`` or raise if it was never built."""
        if provider not in _CREDENTIALS:
            raise RelayError(f"Unknown provider: {provider}")
        client = getattr(self, provider)
        if client is None:
            raise ProviderNotConfiguredError(*_CREDENTIALS[provider])
        return client


# -----------------------------
# Adapters
# -----------------------------
class StreamAdapter:
    """Start a streaming completion and yield normalized events."""

    def __init__(self, client: Any, route: ModelRoute) -> None:
        self.client = client
        self.route = route

    def start(
        self, turns: Sequence[FormattedTurn], system: Optional[str] = None
    ) -> AsyncIterator[StreamEvent]:
        raise NotImplementedError


class ChatCompletionsAdapter(StreamAdapter):
    """OpenAI-style ``chat.completions`` streams (OpenAI and Together)."""

    # finish_reason -> frame state; anything else is ignored
    finish_states: Dict[str, str] = {"stop": "stop", "length": "max_tokens"}

    def _system_role(self) -> str:
        return self.route.system_role

    def _with_system(self, turns: Sequence[FormattedTurn], system: Optional[str]) -> List[FormattedTurn]:
        messages = list(turns)
        if system:
            messages.insert(0, {"role": self._system_role(), "content": system})
        return messages

    async def start(
        self, turns: Sequence[FormattedTurn], system: Optional[str] = None
    ) -> AsyncIterator[StreamEvent]:
        stream = await self.client.chat.completions.create(
            messages=self._with_system(turns, system),
            model=self.route.model,
            stream=True,
        )
        async for chunk in stream:
            choices = getattr(chunk, "choices", None)
            if not choices:
                continue
            choice = choices[0]
            delta = getattr(choice, "delta", None)
            content = getattr(delta, "content", None) if delta is not None else None
            if content:
                yield StreamEvent(content=content)
            state = self.finish_states.get(getattr(choice, "finish_reason", None) or "")
            if state:
                yield StreamEvent(state=state)


class OpenAIAdapter(ChatCompletionsAdapter):
    pass


class TogetherAdapter(ChatCompletionsAdapter):
    finish_states = {"stop": "stop", "eos": "stop", "length": "max_tokens"}

    def _system_role(self) -> str:
        return "system"


class AnthropicAdapter(StreamAdapter):
    """Anthropic Messages API stream; the system text is a top-level field."""

    stop_states: Dict[str, str] = {
        "end_turn": "stop",
        "stop_sequence": "stop",
        "max_tokens": "max_tokens",
    }

    async def start(
        self, turns: Sequence[FormattedTurn], system: Optional[str] = None
    ) -> AsyncIterator[StreamEvent]:
        params: Dict[str, Any] = dict(
            max_tokens=ANTHROPIC_MAX_TOKENS,
            messages=list(turns),
            model=self.route.model,
            stream=True,
        )
        if system:
            params["system"] = system

        stream = await self.client.messages.create(**params)
        async for event in stream:
            etype = getattr(event, "type", None)
            if etype == "content_block_delta":
                # Only text deltas are relayed; thinking/tool deltas carry no .text
                text = getattr(event.delta, "text", None)
                if text:
                    yield StreamEvent(content=text)
            elif etype == "message_delta":
                state = self.stop_states.get(getattr(event.delta, "stop_reason", None) or "")
                if state:
                    yield StreamEvent(state=state)


_ADAPTERS = {
    ANTHROPIC: AnthropicAdapter,
    OPENAI: OpenAIAdapter,
    TOGETHER: TogetherAdapter,
}


def adapter_for(route: ModelRoute, clients: ProviderClients) -> StreamAdapter:
    """Return the adapter for ``route``; fails before any network call if unconfigured."""
    client = clients.require(route.provider)
    return _ADAPTERS[route.provider](client, route)
