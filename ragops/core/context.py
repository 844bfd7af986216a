"""Explicit dependency container for the retrieval pipeline.

Components receive their collaborators through their constructors; this module
wires them once from a `DatabaseManager` so nothing relies on lazily created
module-level clients.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ragops.core.config import Settings, settings as default_settings
from ragops.core.database import DatabaseManager
from ragops.integrations.notion import NotionClient
from ragops.knowledge.ingestion.indexer import DocumentIndexer
from ragops.knowledge.ingestion.storage import MetadataStore, MongoMetadataStore
from ragops.knowledge.ingestion.workers import LocalDirectoryIngestor, NotionSyncWorker
from ragops.knowledge.retrieval.cache import QueryCache
from ragops.knowledge.retrieval.query_engine import QueryEngine
from ragops.knowledge.search.backend import OpenAIFileSearchBackend, SearchBackend
from ragops.utils.monitoring import UsageMonitor

METADATA_COLLECTION = "rag_index"
USAGE_COLLECTION = "rag_usage"


@dataclass
class RAGContext:
    backend: SearchBackend
    metadata: MetadataStore
    cache: QueryCache
    monitor: UsageMonitor
    settings: Settings = field(default_factory=lambda: default_settings)
    notion: Optional[NotionClient] = None

    def indexer(self) -> DocumentIndexer:
        return DocumentIndexer(
            backend=self.backend,
            metadata=self.metadata,
            monitor=self.monitor,
            redact_pii=self.settings.INDEX_REDACT_PII,
        )

    def query_engine(self, *, use_cache: bool = True) -> QueryEngine:
        return QueryEngine(
            backend=self.backend,
            cache=self.cache,
            monitor=self.monitor,
            metadata=self.metadata,
            use_cache=use_cache,
            min_confidence=self.settings.QUERY_CACHE_MIN_CONFIDENCE,
        )

    def notion_worker(self) -> NotionSyncWorker:
        if self.notion is None:
            self.notion = NotionClient(config=self.settings)
        return NotionSyncWorker(self.indexer(), self.notion, config=self.settings)

    def local_ingestor(self, directory: Optional[Path] = None) -> LocalDirectoryIngestor:
        return LocalDirectoryIngestor(self.indexer(), directory or self.settings.DOCS_DIRECTORY)

    async def aclose(self) -> None:
        if self.notion is not None:
            await self.notion.aclose()
            self.notion = None


def build_context(manager: DatabaseManager, *, config: Optional[Settings] = None) -> RAGContext:
    """Wire the pipeline against an initialized `DatabaseManager`."""

    config = config or manager.settings
    database = manager.database
    if database is None:
        raise RuntimeError("DatabaseManager must be initialized before building the context")

    return RAGContext(
        backend=OpenAIFileSearchBackend(config=config),
        metadata=MongoMetadataStore(database[METADATA_COLLECTION]),
        cache=QueryCache(manager.redis, ttl_seconds=config.QUERY_CACHE_TTL_SECONDS),
        monitor=UsageMonitor(
            database[USAGE_COLLECTION],
            latency_threshold_ms=config.ALERT_LATENCY_MS,
            daily_token_limit=config.DAILY_TOKEN_LIMIT,
        ),
        settings=config,
    )


__all__ = ["RAGContext", "build_context"]
