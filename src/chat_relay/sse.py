"""Server-Sent-Events framing for relay output."""

from __future__ import annotations

import json
import threading
import time
from typing import Dict

from .types import StreamFrame

SSE_HEADERS: Dict[str, str] = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}

DONE_FRAME = "data: [DONE]\n\n"

_id_lock = threading.Lock()
_last_id = 0


def new_stream_id() -> str:
    """Return a millisecond-timestamp correlation id.

    Ids are strictly increasing within the process, so two responses started in
    the same millisecond still get distinct ids.
    """
    global _last_id
    with _id_lock:
        now = time.time_ns() // 1_000_000
        _last_id = max(now, _last_id + 1)
        return str(_last_id)


def encode_frame(frame: StreamFrame) -> str:
    payload = json.dumps(frame.to_dict(), ensure_ascii=False, separators=(",", ":"))
    return f"data: {payload}\n\n"


def encode_error(message: str) -> str:
    # A raw newline would end the data line early.
    flat = " ".join(message.splitlines())
    return f"data: [ERROR] {flat}\n\n"


def encode_done() -> str:
    return DONE_FRAME
