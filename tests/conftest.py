"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import json
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

# Ensure src/ is on the import path (for local imports without installing as package)
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


# -----------------------------
# Fake SDK clients
# -----------------------------
async def _replay(items: List[Any]):
    for item in items:
        if isinstance(item, BaseException):
            raise item
        yield item


class _Endpoint:
    """Stands in for ``client.chat.completions`` / ``client.messages``."""

    def __init__(self, events: List[Any]):
        self.events = events
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs: Any):
        self.calls.append(kwargs)
        return _replay(self.events)


class FakeChatClient:
    """OpenAI/Together-shaped client replaying scripted chunks."""

    def __init__(self, events: List[Any]):
        self.completions = _Endpoint(events)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.completions.calls


class FakeAnthropicClient:
    def __init__(self, events: List[Any]):
        self.messages = _Endpoint(events)

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.messages.calls


def chat_chunk(content: Optional[str] = None, finish_reason: Optional[str] = None):
    return SimpleNamespace(
        choices=[
            SimpleNamespace(delta=SimpleNamespace(content=content), finish_reason=finish_reason)
        ]
    )


def anthropic_event(type_: str, **delta: Any):
    return SimpleNamespace(type=type_, delta=SimpleNamespace(**delta))


class RecordingSink:
    """Express-style response sink that records everything done to it."""

    def __init__(self) -> None:
        self.headers: Dict[str, str] = {}
        self.log: List[str] = []
        self.writes: List[str] = []
        self.end_count = 0

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value
        self.log.append("header")

    def flush_headers(self) -> None:
        self.log.append("flush")

    def write(self, data: str) -> None:
        self.writes.append(data)
        self.log.append("write")

    def end(self) -> None:
        self.end_count += 1
        self.log.append("end")


def parse_frames(chunks: List[str]) -> List[Any]:
    """Decode SSE chunks into dicts, or the raw marker for [DONE]/[ERROR] frames."""
    out: List[Any] = []
    for chunk in chunks:
        assert chunk.startswith("data: ") and chunk.endswith("\n\n"), chunk
        body = chunk[len("data: "):-2]
        out.append(body if body.startswith("[") else json.loads(body))
    return out


# -----------------------------
# Fixtures
# -----------------------------
@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the root directory of the project."""
    return Path(__file__).resolve().parent.parent


@pytest.fixture(scope="function")
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Ensure tests run with a clean environment (no leftover vars)."""
    for var in ["CHAT_RELAY_CONFIG", "OPENAI_API_KEY", "ANTHROPIC_API_KEY", "TOGETHER_API_KEY"]:
        monkeypatch.delenv(var, raising=False)
    yield
