"""FastAPI application exposing the streaming relay over SSE."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import load_config
from .models import build_model_table
from .providers import ProviderClients
from .relay import StreamingRelay
from .sse import SSE_HEADERS
from .types import Message

logger = logging.getLogger("chat_relay.server")


# -----------------------------
# Pydantic request
# -----------------------------
class StreamRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    model: str = Field(..., min_length=1, description="Logical model name.")
    message: Message
    previous_messages: List[Message] = Field(default_factory=list, alias="previousMessages")
    system: Optional[str] = Field(default=None, description="Optional instructions.")


# -----------------------------
# Utilities
# -----------------------------
def _get_system_prompt(cfg: Dict[str, Any]) -> Optional[str]:
    sys_prompt = (cfg.get("relay") or {}).get("system_prompt")
    if not sys_prompt:
        return None
    return str(sys_prompt).strip() or None


def _configure_logging(cfg: Dict[str, Any]) -> None:
    level = str((cfg.get("logging") or {}).get("level", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO))


# -----------------------------
# App factory
# -----------------------------
def create_app(
    config_path: Optional[str] = None,
    clients: Optional[ProviderClients] = None,
) -> FastAPI:
    cfg = load_config(config_path)
    _configure_logging(cfg)

    # CORS
    cors_origins = (cfg.get("server") or {}).get("cors_origins", ["*"])

    # Services
    models = build_model_table(cfg.get("models"))
    clients = clients or ProviderClients.from_env()
    default_system = _get_system_prompt(cfg)

    app = FastAPI(title="Chat Relay", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {
            "ok": True,
            "providers": clients.available(),
            "models": list(models),
        }

    @app.get("/models")
    def list_models() -> Dict[str, Any]:
        return {
            "models": [
                {"name": r.name, "provider": r.provider, "model": r.model}
                for r in models.values()
            ]
        }

    @app.post("/chat/stream")
    async def chat_stream(req: StreamRequest) -> StreamingResponse:
        relay = StreamingRelay(
            req.model,
            req.system if req.system is not None else default_system,
            clients=clients,
            models=models,
        )
        # StreamingResponse sends the headers before pulling the first frame.
        return StreamingResponse(
            relay.stream(req.message, req.previous_messages),
            media_type=SSE_HEADERS["Content-Type"],
            headers={k: v for k, v in SSE_HEADERS.items() if k != "Content-Type"},
        )

    return app
