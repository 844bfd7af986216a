"""Document metadata persistence."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol

from ragops.models import DocumentRecord

logger = logging.getLogger(__name__)


class MetadataStore(Protocol):
    async def find_by_content_hash(self, content_hash: str) -> Optional[DocumentRecord]:
        ...

    async def save(self, record: DocumentRecord) -> None:
        ...

    async def recent(self, limit: int) -> List[DocumentRecord]:
        ...


class MongoMetadataStore:
    """Document records in a MongoDB collection keyed by `id`."""

    def __init__(self, collection: Any) -> None:
        self.collection = collection

    async def find_by_content_hash(self, content_hash: str) -> Optional[DocumentRecord]:
        payload = await self.collection.find_one({"content_hash": content_hash}, {"_id": 0})
        if not payload:
            return None
        return DocumentRecord.model_validate(payload)

    async def save(self, record: DocumentRecord) -> None:
        await self.collection.replace_one({"id": record.id}, record.model_dump(), upsert=True)

    async def recent(self, limit: int) -> List[DocumentRecord]:
        cursor = self.collection.find({}, {"_id": 0}).sort("indexed_at", -1).limit(limit)
        return [DocumentRecord.model_validate(doc) async for doc in cursor]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index("id", unique=True)
        await self.collection.create_index("content_hash")
        await self.collection.create_index([("indexed_at", -1)])
        logger.info("Ensured indexes on %s", getattr(self.collection, "name", "metadata collection"))
