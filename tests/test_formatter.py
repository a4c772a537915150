from __future__ import annotations

from chat_relay.formatter import build_messages, build_messages_with_agents
from chat_relay.types import AgentResponse, Message


def _user(text: str, agents=None, id_: str = "u") -> Message:
    return Message(id=id_, text=text, role="user", agentsResponse=agents)


def test_user_turn_with_agent_notes():
    msg = _user(
        "hi",
        [
            AgentResponse(name="A", note="x", payload={"k": 1}),
            AgentResponse(name="B", note="y", payload=None),
        ],
    )
    [turn] = build_messages_with_agents([msg])

    assert turn["role"] == "user"
    assert turn["content"] == (
        "<user>\nhi\n</user>\n---\n"
        '<agent name="A">\nx\n</agent>\n\n'
        '<agent name="B">\ny\n</agent>'
    )


def test_user_turn_without_agents_ends_at_separator():
    for agents in (None, []):
        [turn] = build_messages_with_agents([_user("hello", agents)])
        assert turn["content"] == "<user>\nhello\n</user>\n---"


def test_assistant_turn_is_verbatim():
    msg = Message(id="a", text="  reply with spaces \n", role="assistant")
    assert build_messages_with_agents([msg]) == [
        {"role": "assistant", "content": "  reply with spaces \n"}
    ]


def test_length_order_and_roles_preserved():
    convo = [
        _user("one", id_="1"),
        Message(id="2", text="two", role="assistant"),
        _user("three", [AgentResponse(name="search", note="found")], id_="3"),
        Message(id="4", text="four", role="assistant"),
    ]
    turns = build_messages_with_agents(convo)

    assert len(turns) == len(convo)
    assert [t["role"] for t in turns] == [m.role for m in convo]
    assert turns[1]["content"] == "two"
    assert '<agent name="search">' in turns[2]["content"]


def test_build_messages_drops_agent_notes():
    convo = [
        _user("q", [AgentResponse(name="A", note="x")]),
        Message(id="2", text="a", role="assistant"),
    ]
    assert build_messages(convo) == [
        {"role": "user", "content": "q"},
        {"role": "assistant", "content": "a"},
    ]


def test_message_accepts_camel_and_snake_case():
    camel = Message.model_validate(
        {"id": "1", "text": "t", "role": "user", "isFinished": True,
         "agentsResponse": [{"name": "A", "note": "n", "payload": [1, 2]}]}
    )
    snake = Message(id="1", text="t", role="user", is_finished=True,
                    agents_response=[AgentResponse(name="A", note="n", payload=[1, 2])])
    assert camel == snake
