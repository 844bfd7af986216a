"""Query and indexing endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from ragops.api.dependencies import get_context, get_query_engine
from ragops.api.security import require_admin
from ragops.core.context import RAGContext
from ragops.knowledge.retrieval.query_engine import QueryEngine
from ragops.models import DocumentRecord, IndexRequest, QueryAnswer, QueryRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rag", tags=["rag"], dependencies=[Depends(require_admin)])


@router.post("/query", response_model=QueryAnswer)
async def query(request: QueryRequest, engine: QueryEngine = Depends(get_query_engine)) -> QueryAnswer:
    return await engine.process(request.query, request.limit)


@router.post("/index", response_model=DocumentRecord)
async def index_document(request: IndexRequest, context: RAGContext = Depends(get_context)) -> DocumentRecord:
    record = await context.indexer().ingest(
        request.filename,
        request.content,
        request.mime_type or "text/plain",
        tags=["api"],
    )
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File blocked by security filter (restricted pattern or confidential content)",
        )
    return record


@router.post("/index-docs")
async def index_docs(context: RAGContext = Depends(get_context)) -> Dict[str, Any]:
    results = await context.local_ingestor().run()
    return {
        "directory": str(context.settings.DOCS_DIRECTORY),
        "indexed": sum(1 for result in results if result.status == "indexed"),
        "results": [asdict(result) for result in results],
    }


@router.get("/status")
async def rag_status(context: RAGContext = Depends(get_context)) -> Dict[str, Any]:
    engine = context.query_engine()
    documents = await engine.recent_documents(limit=10)
    tokens_today = await context.monitor.daily_usage()
    return {
        "configured": {
            "openai": bool(context.settings.OPENAI_API_KEY),
            "notion": bool(context.settings.NOTION_TOKEN),
        },
        "recent_documents": [document.model_dump(mode="json") for document in documents],
        "tokens_today": tokens_today,
        "daily_token_limit": context.settings.DAILY_TOKEN_LIMIT,
    }
