from __future__ import annotations

from fastapi import Request

from ragops.core.context import RAGContext
from ragops.knowledge.retrieval.query_engine import QueryEngine


async def get_context(request: Request) -> RAGContext:
    return request.app.state.rag


async def get_query_engine(request: Request) -> QueryEngine:
    return request.app.state.rag.query_engine()
