"""FastAPI application entrypoint for RAGOps."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ragops.api.middleware.logging import LoggingMiddleware
from ragops.api.routes import rag, sync
from ragops.core.config import settings
from ragops.core.context import build_context
from ragops.core.database import database_manager
from ragops.core.exceptions import ApplicationError, UpstreamError
from ragops.core.observability import setup_tracing

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize shared resources on startup and tear them down on shutdown."""

    await database_manager.initialize()
    app.state.rag = build_context(database_manager)

    try:
        yield
    finally:
        await app.state.rag.aclose()
        await database_manager.close()


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

setup_tracing(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)

# Routers
app.include_router(rag.router, prefix="/api")
app.include_router(sync.router, prefix="/api")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.exception_handler(ApplicationError)
async def handle_application_error(_: Request, exc: ApplicationError):
    """Return standardized responses for application layer exceptions."""

    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


@app.exception_handler(httpx.HTTPStatusError)
async def handle_upstream_status(request: Request, exc: httpx.HTTPStatusError):
    logger.error("Upstream call failed during %s: %s", request.url.path, exc)
    error = UpstreamError(
        f"Upstream service returned {exc.response.status_code}",
        upstream_status=exc.response.status_code,
    )
    return await handle_application_error(request, error)
