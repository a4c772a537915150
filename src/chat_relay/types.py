"""Data model shared by the formatter, the relay and the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]
StreamState = Literal["stop", "max_tokens"]

# Opaque JSON-like value carried by agent annotations; never inspected here.
JSONValue = Any


# -----------------------------
# Inbound conversation
# -----------------------------
class AgentResponse(BaseModel):
    """Annotation attached to a user turn by an auxiliary agent."""

    name: str
    note: str
    payload: JSONValue = None


class Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    text: str
    role: Role
    is_finished: Optional[bool] = Field(default=None, alias="isFinished")
    agents_response: Optional[List[AgentResponse]] = Field(
        default=None, alias="agentsResponse"
    )


# -----------------------------
# Provider-neutral shapes
# -----------------------------
FormattedTurn = Dict[str, str]  # {"role": ..., "content": ...}


@dataclass(frozen=True)
class StreamEvent:
    """One normalized item produced by a provider stream adapter."""

    content: str = ""
    state: Optional[StreamState] = None


@dataclass(frozen=True)
class StreamFrame:
    """A :class:`StreamEvent` stamped with the response's correlation id."""

    id: str
    content: str
    state: Optional[StreamState] = None

    def to_dict(self) -> Dict[str, str]:
        out = {"id": self.id, "content": self.content}
        if self.state is not None:
            out["state"] = self.state
        return out
