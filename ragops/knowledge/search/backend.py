"""Managed search-and-generation backend.

The rest of the service only sees the two-operation `SearchBackend` surface.
`OpenAIFileSearchBackend` implements it on top of an OpenAI vector store: it
finds or creates the store by display name, uploads documents into it and
answers questions with the Responses API `file_search` tool.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Protocol

from openai import AsyncOpenAI

from ragops.core.config import Settings, settings as default_settings
from ragops.core.exceptions import ConfigurationError, IngestionError
from ragops.knowledge.ingestion.security import document_id_for
from ragops.models import DocumentSource
from ragops.utils.retry import is_retryable, retry_with_backoff

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 280
NO_ANSWER_TEXT = "No response generated."


@dataclass
class GeneratedAnswer:
    text: str
    confidence: float
    sources: List[DocumentSource] = field(default_factory=list)


class SearchBackend(Protocol):
    async def upload(self, data: bytes, mime_type: str, display_name: str) -> str:
        """Store a document and return its opaque locator."""
        ...

    async def generate(self, query: str, limit: int = 3) -> GeneratedAnswer:
        """Answer `query` grounded on at most `limit` retrieved passages."""
        ...


class OpenAIFileSearchBackend:
    """OpenAI vector store plus `file_search` generation."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, *, config: Optional[Settings] = None) -> None:
        self.settings = config or default_settings
        if client is None and self.settings.OPENAI_API_KEY:
            # The SDK's own retries are disabled so the policy below is the only one.
            client = AsyncOpenAI(
                api_key=self.settings.OPENAI_API_KEY,
                max_retries=0,
                timeout=self.settings.OPENAI_TIMEOUT_SECONDS,
            )
        elif client is None:
            logger.warning("OPENAI_API_KEY is not set. Search backend calls will fail.")
        self.client = client
        self.model = self.settings.OPENAI_MODEL
        self.store_name = self.settings.VECTOR_STORE_NAME
        self.max_attempts = self.settings.BACKEND_RETRY_ATTEMPTS
        self.base_delay = self.settings.BACKEND_RETRY_BASE_DELAY_SECONDS
        self._store_id: Optional[str] = None
        self._store_lock = asyncio.Lock()

    def _require_client(self) -> AsyncOpenAI:
        if self.client is None:
            raise ConfigurationError("OPENAI_API_KEY not configured")
        return self.client

    async def store_id(self) -> str:
        """Resolve the vector store by display name, creating it on first use."""

        if self._store_id:
            return self._store_id

        client = self._require_client()
        async with self._store_lock:
            if self._store_id:
                return self._store_id
            self._store_id = await retry_with_backoff(
                lambda: self._find_or_create_store(client),
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                should_retry=is_retryable,
                label="vector store lookup",
            )
        return self._store_id

    async def _find_or_create_store(self, client: AsyncOpenAI) -> str:
        async for store in client.vector_stores.list():
            if store.name == self.store_name:
                logger.info("Using vector store %s (%s)", store.name, store.id)
                return store.id
        store = await client.vector_stores.create(name=self.store_name)
        logger.info("Created vector store %s (%s)", self.store_name, store.id)
        return store.id

    async def upload(self, data: bytes, mime_type: str, display_name: str) -> str:
        client = self._require_client()
        store_id = await self.store_id()

        vector_file = await client.vector_stores.files.upload_and_poll(
            vector_store_id=store_id,
            file=(display_name, data, mime_type),
            poll_interval_ms=self.settings.UPLOAD_POLL_INTERVAL_MS,
        )
        if vector_file.status != "completed":
            error = getattr(vector_file, "last_error", None)
            raise IngestionError(
                f"Upload of {display_name} finished with status {vector_file.status}",
                details={"error": getattr(error, "message", None)},
            )
        return vector_file.id

    async def generate(self, query: str, limit: int = 3) -> GeneratedAnswer:
        client = self._require_client()
        store_id = await self.store_id()

        response = await retry_with_backoff(
            lambda: client.responses.create(
                model=self.model,
                input=query,
                tools=[
                    {
                        "type": "file_search",
                        "vector_store_ids": [store_id],
                        "max_num_results": limit,
                    }
                ],
                tool_choice="required",
                include=["file_search_call.results"],
            ),
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            should_retry=is_retryable,
            label="answer generation",
        )
        return self._to_answer(response, limit)

    def _to_answer(self, response: Any, limit: int) -> GeneratedAnswer:
        sources = _collect_sources(getattr(response, "output", None) or [])
        sources.sort(key=lambda source: source.relevance, reverse=True)
        sources = sources[:limit]
        # Confidence is the best retrieval score; ungrounded answers score 0.
        confidence = sources[0].relevance if sources else 0.0
        text = getattr(response, "output_text", "") or NO_ANSWER_TEXT
        return GeneratedAnswer(text=text, confidence=confidence, sources=sources)


def _collect_sources(output: Iterable[Any]) -> List[DocumentSource]:
    sources: List[DocumentSource] = []
    for item in output:
        if getattr(item, "type", None) != "file_search_call":
            continue
        for result in getattr(item, "results", None) or []:
            filename = getattr(result, "filename", None) or getattr(result, "file_id", "unknown")
            score = float(getattr(result, "score", 0.0) or 0.0)
            sources.append(
                DocumentSource(
                    document_id=document_id_for(filename),
                    filename=filename,
                    snippet=(getattr(result, "text", None) or "")[:SNIPPET_LENGTH],
                    relevance=min(max(score, 0.0), 1.0),
                )
            )
    return sources


__all__ = ["GeneratedAnswer", "OpenAIFileSearchBackend", "SearchBackend"]
