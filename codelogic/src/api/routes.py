"""
codelogic/src/api/routes.py — API Route Definitions

Responsibility:
    Defines the REST endpoints:
      - /api/chat        → Ask a question against the selected codes
                           (every verb is routed here; only POST is served)
      - GET /api/categories → Category code → document table for the UI
      - GET /health      → Liveness probe

    Each handler is a thin controller: it parses the request, delegates
    to ``AnswerEngine`` and returns the response model.  Failures are
    raised as ``AnswerError`` and rendered by the handler in main.py.

Related Files:
    - codelogic/src/main.py            → Routes are registered here
    - codelogic/src/core/rag_engine.py → Business logic invoked by handlers
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from codelogic.src.core.errors import BadRequest
from codelogic.src.core.rag_engine import AnswerEngine
from codelogic.src.core.schemas import ChatRequest, ChatResponse

router = APIRouter()

_CHAT_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_engine(request: Request) -> AnswerEngine:
    return request.app.state.engine


async def _read_chat_request(request: Request) -> ChatRequest | None:
    """Parse the JSON body of a POST; other verbs carry no payload."""
    if request.method != "POST":
        return None

    body = await request.body()
    if not body.strip():
        return None
    try:
        return ChatRequest.model_validate(json.loads(body))
    except json.JSONDecodeError as exc:
        raise BadRequest(f"Request body is not valid JSON: {exc.msg}") from exc
    except UnicodeDecodeError as exc:
        raise BadRequest(f"Request body is not valid JSON: {exc.reason}") from exc
    except ValidationError as exc:
        raise BadRequest(f"Invalid request body: {exc.errors()[0]['msg']}") from exc


@router.api_route("/api/chat", methods=_CHAT_METHODS, response_model=ChatResponse)
async def chat(request: Request, engine: AnswerEngine = Depends(get_engine)) -> ChatResponse:
    payload = await _read_chat_request(request)
    result = await engine.answer(request.method, payload)
    return result.to_response()


@router.get("/api/categories")
async def categories(engine: AnswerEngine = Depends(get_engine)) -> dict[str, list[str]]:
    return engine.categories


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
