"""Request/response logging middleware."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger("ragops.api")

QUIET_PATHS = frozenset({"/health"})
RAG_PREFIX = "/api/rag/"


def rag_operation(path: str) -> Optional[str]:
    """`query`, `index`, `sync`... for pipeline routes, None for anything else."""

    if not path.startswith(RAG_PREFIX):
        return None
    return path[len(RAG_PREFIX):].strip("/") or None


class LoggingMiddleware(BaseHTTPMiddleware):
    """Structured logging for pipeline requests; health probes are not logged."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"

        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "request.completed",
            extra={
                "path": path,
                "method": request.method,
                "operation": rag_operation(path),
                "status": response.status_code,
                "authenticated": "x-api-key" in request.headers,
                "duration_ms": round(duration_ms, 2),
                "client": request.client.host if request.client else None,
            },
        )

        return response
