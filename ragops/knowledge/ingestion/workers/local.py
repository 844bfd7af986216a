"""Local documentation directory ingestion worker."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ragops.knowledge.ingestion.indexer import DocumentIndexer
from ragops.knowledge.ingestion.workers.base import BaseIngestionWorker

logger = logging.getLogger(__name__)


@dataclass
class LocalIngestResult:
    file: str
    status: str
    document_id: Optional[str] = None
    error: Optional[str] = None


class LocalDirectoryIngestor(BaseIngestionWorker):
    """Index every Markdown file at the top level of a directory."""

    source = "local"

    def __init__(self, indexer: DocumentIndexer, directory: Path, *, pattern: str = "*.md") -> None:
        super().__init__(indexer)
        self.directory = Path(directory)
        self.pattern = pattern

    async def run(self) -> List[LocalIngestResult]:
        if not self.directory.is_dir():
            logger.warning("Skipping local ingestion; %s is not a directory.", self.directory)
            return []

        logger.info("[RAG Indexer] Scanning %s", self.directory)
        results: List[LocalIngestResult] = []
        for path in sorted(self.directory.glob(self.pattern)):
            if path.is_file():
                results.append(await self._ingest_file(path))

        indexed = sum(1 for result in results if result.status == "indexed")
        logger.info("[RAG Indexer] Indexed %s of %s files", indexed, len(results))
        return results

    async def _ingest_file(self, path: Path) -> LocalIngestResult:
        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
            record = await self.process_document(path.name, content, "text/markdown")
        except Exception as exc:
            logger.error("Failed to index %s: %s", path.name, exc)
            return LocalIngestResult(file=path.name, status="error", error=str(exc))

        if record is None:
            return LocalIngestResult(file=path.name, status="skipped")
        return LocalIngestResult(file=path.name, status="indexed", document_id=record.id)


__all__ = ["LocalDirectoryIngestor", "LocalIngestResult"]
