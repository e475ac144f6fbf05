"""
codelogic/src/main.py — Application Entry Point

Responsibility:
    FastAPI application factory.  Registers the routes from
    codelogic/src/api/routes.py, renders every ``AnswerError`` as
    ``{"error": message}`` with its status code, and builds the
    ``AnswerEngine`` once per process in the lifespan handler unless one
    is injected (tests).

Run:
    uvicorn codelogic.src.main:app --reload

Related Files:
    - codelogic/src/api/routes.py       → Routes mounted here
    - codelogic/src/core/rag_engine.py  → Engine built during startup
    - codelogic/config/settings.py      → .env loaded at import time
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from codelogic.src.api.routes import router
from codelogic.src.core.errors import AnswerError
from codelogic.src.core.rag_engine import AnswerEngine
from codelogic.src.utils.logger import get_logger, quiet_third_party_loggers

logger = get_logger(__name__)


async def _answer_error_handler(request: Request, exc: AnswerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def create_app(engine: AnswerEngine | None = None) -> FastAPI:
    """Build the API; ``engine`` overrides the settings-built default."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "engine", None) is None:
            quiet_third_party_loggers()
            app.state.engine = AnswerEngine.from_settings()
            logger.info("AnswerEngine ready.")
        yield

    app = FastAPI(title="CodeLogic Pro", lifespan=lifespan)
    app.state.engine = engine
    app.add_exception_handler(AnswerError, _answer_error_handler)
    app.include_router(router)
    return app


app = create_app()
