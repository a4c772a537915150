"""Streaming relay: one instance per request.

The relay resolves a logical model name to a provider, sends the formatted
conversation to that provider's streaming API and re-emits every event as a
normalized SSE frame. Failures at any point become a single ``[ERROR]`` frame.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator, Mapping, Optional, Protocol, Sequence

from .formatter import build_messages_with_agents
from .models import ModelRoute, resolve_model
from .providers import ProviderClients, adapter_for
from .sse import SSE_HEADERS, encode_done, encode_error, encode_frame, new_stream_id
from .types import Message, StreamFrame

logger = logging.getLogger("chat_relay.relay")


class EventSink(Protocol):
    """Writable, flushable response the relay streams into."""

    def set_header(self, name: str, value: str) -> None: ...

    def flush_headers(self) -> None: ...

    def write(self, data: str) -> None: ...

    def end(self) -> None: ...


class StreamingRelay:
    def __init__(
        self,
        model: str,
        system: Optional[str] = None,
        *,
        clients: ProviderClients,
        sink: Optional[EventSink] = None,
        models: Optional[Mapping[str, ModelRoute]] = None,
    ) -> None:
        self.model = model
        self.system = system
        self.clients = clients
        self.sink = sink
        self.models = models

    async def stream(
        self, message: Message, previous_messages: Sequence[Message] = ()
    ) -> AsyncIterator[str]:
        """Yield encoded SSE frames for one response.

        Ends with ``[DONE]`` on success or a single ``[ERROR]`` frame on failure,
        never both.
        """
        try:
            route = resolve_model(self.model, self.models)
            adapter = adapter_for(route, self.clients)
            turns = build_messages_with_agents([*previous_messages, message])
            logger.info(
                "Relaying %d turn(s) to %s model %s", len(turns), route.provider, route.model
            )

            stream_id = new_stream_id()
            async for event in adapter.start(turns, self.system):
                yield encode_frame(StreamFrame(stream_id, event.content, event.state))
        except Exception as e:
            logger.exception("Stream for model %s failed", self.model)
            yield encode_error(str(e))
            return
        logger.debug("Stream for model %s finished", self.model)
        yield encode_done()

    async def run(self, message: Message, previous_messages: Sequence[Message] = ()) -> None:
        """Stream the response for ``message`` into the sink and close it."""
        sink = self.sink
        if sink is None:
            raise RuntimeError("StreamingRelay.run() needs a sink")

        for name, value in SSE_HEADERS.items():
            sink.set_header(name, value)
        sink.flush_headers()
        try:
            async for chunk in self.stream(message, previous_messages):
                sink.write(chunk)
        finally:
            sink.end()
