"""FastAPI application exposing the rule-based responder."""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import DEFAULT_SYSTEM_PROMPT, load_config
from .responder import Responder, format_history
from .typing import Message

logger = logging.getLogger(__name__)

MESSAGES_REQUIRED = "Messages array is required."
UNEXPECTED_ERROR = "Unexpected server error"


# -----------------------------
# Pydantic request/response
# -----------------------------
class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    messages: Optional[List[ChatMessage]] = Field(
        default=None, description="Full conversation so far, oldest first."
    )


class ChatResponse(BaseModel):
    reply: str


# -----------------------------
# Utilities
# -----------------------------
def _get_system_prompt(cfg: Dict[str, Any]) -> str:
    sys_prompt = cfg.get("persona", {}).get("system_prompt") or DEFAULT_SYSTEM_PROMPT
    return str(sys_prompt).strip()


def _make_responder(cfg: Dict[str, Any]) -> Responder:
    seed = cfg.get("responder", {}).get("seed")
    rng = random.Random(int(seed)) if seed is not None else None
    return Responder(rng=rng)


def _prepare_history(messages: List[ChatMessage], system_prompt: str) -> List[Message]:
    """Drop blank messages and prepend the persona system message."""
    history: List[Message] = [{"role": "system", "content": system_prompt}]
    for m in messages:
        if not m.content.strip():
            continue
        history.append({"role": m.role, "content": m.content})
    return history


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    for err in errors:
        loc = tuple(err.get("loc", ()))
        if loc == ("body", "messages") or (loc == ("body",) and err.get("type") == "missing"):
            return MESSAGES_REQUIRED
    if not errors:
        return "Invalid request."
    first = errors[0]
    where = ".".join(str(p) for p in first.get("loc", ())[1:])
    msg = first.get("msg", "Invalid request.")
    return f"{where}: {msg}" if where else str(msg)


# -----------------------------
# App factory
# -----------------------------
def create_app(
    config_path: Optional[str] = None,
    responder: Optional[Responder] = None,
) -> FastAPI:
    cfg = load_config(config_path)

    cors_origins = cfg.get("server", {}).get("cors_origins", ["*"])
    responder = responder or _make_responder(cfg)
    system_prompt = _get_system_prompt(cfg)

    app = FastAPI(title="Nova Chat Server", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse({"error": _describe_validation_error(exc)}, status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"ok": True, "rules": list(getattr(responder, "rule_names", []))}

    @app.post("/api/chat", response_model=ChatResponse)
    def chat(req: ChatRequest):
        if req.messages is None:
            raise HTTPException(status_code=400, detail=MESSAGES_REQUIRED)

        try:
            history = _prepare_history(req.messages, system_prompt)
            logger.info(
                "Incoming chat: %d message(s), %d after filtering",
                len(req.messages),
                len(history) - 1,
            )
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Conversation:\n%s", format_history(history))
            reply = responder.reply(history)
        except Exception as e:
            logger.exception("Chat processing failed: %s", e)
            return JSONResponse({"error": str(e) or UNEXPECTED_ERROR}, status_code=500)

        return ChatResponse(reply=reply)

    return app
