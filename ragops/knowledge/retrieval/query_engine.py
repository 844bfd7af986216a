"""Natural-language question answering over the indexed corpus."""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from opentelemetry import trace

from ragops.core.config import settings
from ragops.core.exceptions import ValidationError
from ragops.knowledge.ingestion.indexer import estimate_tokens
from ragops.knowledge.ingestion.storage import MetadataStore
from ragops.knowledge.retrieval.cache import QueryCache, query_key
from ragops.knowledge.search.backend import SearchBackend
from ragops.models import DocumentRecord, QueryAnswer
from ragops.models.query import DEFAULT_LIMIT, MAX_LIMIT, MAX_QUERY_LENGTH, MIN_LIMIT, MIN_QUERY_LENGTH
from ragops.utils.monitoring import UsageMonitor, query_event

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class QueryEngine:
    """Cache-first query processing.

    Only answers that are not errored and whose confidence exceeds
    `min_confidence` are cached, so a weak answer is never served twice
    without asking the backend again.
    """

    def __init__(
        self,
        *,
        backend: SearchBackend,
        cache: QueryCache,
        monitor: UsageMonitor,
        metadata: Optional[MetadataStore] = None,
        use_cache: bool = True,
        min_confidence: Optional[float] = None,
    ) -> None:
        self.backend = backend
        self.cache = cache
        self.monitor = monitor
        self.metadata = metadata
        self.use_cache = use_cache
        self.min_confidence = settings.QUERY_CACHE_MIN_CONFIDENCE if min_confidence is None else min_confidence

    async def process(self, query: str, limit: int = DEFAULT_LIMIT) -> QueryAnswer:
        validate_query(query, limit)

        start = time.perf_counter()
        key = query_key(query)

        with tracer.start_as_current_span("rag.query") as span:
            span.set_attribute("rag.query_key", key)
            span.set_attribute("rag.limit", limit)

            answer = await self._from_cache(key, start)
            if answer is None:
                answer = await self._generate(query, limit)
                if self.use_cache and not answer.errored and answer.confidence > self.min_confidence:
                    await self.cache.put(key, answer)
                answer.elapsed_ms = _elapsed_ms(start)

            span.set_attribute("rag.cached", answer.cached)
            span.set_attribute("rag.errored", answer.errored)

        await self.monitor.track(
            query_event(
                tokens=estimate_tokens(answer.text),
                latency_ms=answer.elapsed_ms,
                success=not answer.errored,
                query_key=key,
                cached=answer.cached,
            )
        )
        return answer

    async def _from_cache(self, key: str, start: float) -> Optional[QueryAnswer]:
        if not self.use_cache:
            return None
        entry = await self.cache.get(key)
        if entry is None:
            return None
        await self.cache.record_hit(entry)
        return entry.result.model_copy(update={"cached": True, "elapsed_ms": _elapsed_ms(start)})

    async def _generate(self, query: str, limit: int) -> QueryAnswer:
        try:
            generated = await self.backend.generate(query, limit)
        except Exception as exc:
            logger.error("Search backend query failed: %s", exc)
            message = str(exc) or "Error processing query with the search backend."
            return QueryAnswer(text=message, confidence=0.0, errored=True)

        return QueryAnswer(
            text=generated.text,
            sources=list(generated.sources),
            confidence=min(max(generated.confidence, 0.0), 1.0),
        )

    async def recent_documents(self, limit: int = 10) -> List[DocumentRecord]:
        if self.metadata is None:
            return []
        try:
            return await self.metadata.recent(limit)
        except Exception as exc:
            logger.warning("RAG index read failed: %s", exc)
            return []


def validate_query(query: str, limit: int) -> None:
    if not isinstance(query, str) or not MIN_QUERY_LENGTH <= len(query) <= MAX_QUERY_LENGTH:
        raise ValidationError(
            f"Query must be between {MIN_QUERY_LENGTH} and {MAX_QUERY_LENGTH} characters",
            details={"length": len(query) if isinstance(query, str) else None},
        )
    if isinstance(limit, bool) or not isinstance(limit, int) or not MIN_LIMIT <= limit <= MAX_LIMIT:
        raise ValidationError(
            f"limit must be an integer between {MIN_LIMIT} and {MAX_LIMIT}",
            details={"limit": limit},
        )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


__all__ = ["QueryEngine", "validate_query"]
