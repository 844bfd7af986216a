"""Single-document ingestion: filter, deduplicate, upload, record."""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from ragops.core.config import settings
from ragops.core.exceptions import IngestionError
from ragops.knowledge.ingestion.security import (
    contains_pii,
    document_id_for,
    fingerprint,
    is_indexable,
    sanitize_for_index,
)
from ragops.knowledge.ingestion.storage import MetadataStore
from ragops.knowledge.search.backend import SearchBackend
from ragops.models import DocumentRecord
from ragops.utils.monitoring import UsageMonitor, ingest_event

logger = logging.getLogger(__name__)


def estimate_tokens(content: str) -> int:
    return len(content) // 4


class DocumentIndexer:
    """Idempotent by content: a fingerprint already on record is never uploaded twice.

    The lookup and the write are not atomic. Two concurrent calls with the same
    new content can both miss the lookup and upload twice.

    Content carrying SSNs or e-mail addresses is logged; with `redact_pii` it is
    redacted before hashing, so the stored text and its fingerprint agree.
    """

    def __init__(
        self,
        *,
        backend: SearchBackend,
        metadata: MetadataStore,
        monitor: UsageMonitor,
        redact_pii: Optional[bool] = None,
    ) -> None:
        self.backend = backend
        self.metadata = metadata
        self.monitor = monitor
        self.redact_pii = settings.INDEX_REDACT_PII if redact_pii is None else redact_pii

    async def ingest(
        self,
        filename: str,
        content: str,
        mime_type: str = "text/plain",
        *,
        tags: Optional[List[str]] = None,
    ) -> Optional[DocumentRecord]:
        if not is_indexable(filename, content):
            logger.info("Skipping restricted file: %s", filename)
            return None

        if contains_pii(content):
            if self.redact_pii:
                logger.info("Redacting personal data in %s before indexing", filename)
                content = sanitize_for_index(content)
            else:
                logger.warning("Document %s appears to contain personal data (SSN or e-mail)", filename)

        content_hash = fingerprint(content)
        existing = await self._lookup(content_hash)
        if existing is not None:
            logger.info("Document already indexed: %s (as %s)", filename, existing.filename)
            return existing

        tokens = estimate_tokens(content)
        start = time.perf_counter()
        try:
            locator = await self.backend.upload(content.encode("utf-8"), mime_type, filename)
        except Exception as exc:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            await self.monitor.track(
                ingest_event(tokens=tokens, success=False, latency_ms=elapsed_ms, filename=filename, error=str(exc))
            )
            if isinstance(exc, IngestionError):
                raise
            raise IngestionError(f"Upload of {filename} failed: {exc}", details={"filename": filename}) from exc
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        record = DocumentRecord(
            id=document_id_for(filename),
            locator=locator,
            filename=filename,
            mime_type=mime_type,
            content_hash=content_hash,
            token_estimate=tokens,
            tags=tags,
        )

        try:
            await self.metadata.save(record)
        except Exception as exc:
            # The upload already happened; the record is returned regardless.
            logger.error("Failed to save index metadata for %s: %s", filename, exc)

        await self.monitor.track(
            ingest_event(tokens=tokens, success=True, latency_ms=elapsed_ms, filename=filename, document_id=record.id)
        )
        logger.info("Indexed %s as %s", filename, record.id)
        return record

    async def _lookup(self, content_hash: str) -> Optional[DocumentRecord]:
        try:
            return await self.metadata.find_by_content_hash(content_hash)
        except Exception as exc:
            logger.warning("Index check failed, treating as new document: %s", exc)
            return None


__all__ = ["DocumentIndexer", "estimate_tokens"]
