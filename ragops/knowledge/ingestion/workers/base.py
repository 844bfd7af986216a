"""Common ingestion worker scaffolding."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ragops.knowledge.ingestion.indexer import DocumentIndexer
from ragops.models import DocumentRecord

logger = logging.getLogger(__name__)


class BaseIngestionWorker:
    """Base class shared across ingestion workers."""

    source: str = "unknown"

    def __init__(self, indexer: DocumentIndexer) -> None:
        self.indexer = indexer

    async def process_document(self, filename: str, content: str, mime_type: str = "text/plain") -> Optional[DocumentRecord]:
        """Hand one document to the indexer; errors propagate to the worker."""

        record = await self.indexer.ingest(filename, content, mime_type, tags=[self.source])
        if record is None:
            logger.info("%s document %s filtered out", self.source, filename)
        return record

    async def run(self) -> Any:
        raise NotImplementedError
