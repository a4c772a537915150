"""Turn a conversation into role/content pairs for chat-completion APIs."""

from __future__ import annotations

from typing import Iterable, List

from .types import AgentResponse, FormattedTurn, Message


def _agent_block(agent: AgentResponse) -> str:
    return f'<agent name="{agent.name}">\n{agent.note}\n</agent>'


def _user_content(message: Message) -> str:
    agents = "\n\n".join(_agent_block(a) for a in message.agents_response or [])
    return f"<user>\n{message.text}\n</user>\n---\n{agents}\n".strip()


def build_messages_with_agents(messages: Iterable[Message]) -> List[FormattedTurn]:
    """Format messages, folding agent annotations into each user turn.

    Assistant turns pass through verbatim. User turns are wrapped in a
    ``<user>`` block followed by a ``---`` separator and one ``<agent>`` block
    per annotation, in order.
    """
    out: List[FormattedTurn] = []
    for m in messages:
        if m.role == "assistant":
            out.append({"role": "assistant", "content": m.text})
        else:
            out.append({"role": m.role, "content": _user_content(m)})
    return out


def build_messages(messages: Iterable[Message]) -> List[FormattedTurn]:
    """Format messages as plain ``{role, content}`` pairs, dropping agent notes."""
    return [{"role": m.role, "content": m.text} for m in messages]
