"""Document data model definitions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentRecord(BaseModel):
    """Metadata for one document stored in the search backend.

    Records are written once by the indexer and never mutated; the content
    hash is the deduplication key, not the filename.
    """

    id: str = Field(..., description="Deterministic identifier derived from the filename")
    locator: str = Field(..., description="Opaque handle of the document in the search backend")
    filename: str
    mime_type: str = "text/plain"
    content_hash: str = Field(..., description="SHA-256 hex digest of the raw text")
    indexed_at: datetime = Field(default_factory=utcnow)
    token_estimate: int = Field(0, ge=0)
    tags: Optional[List[str]] = None


class IndexRequest(BaseModel):
    filename: str = Field(..., min_length=1)
    content: str
    mime_type: Optional[str] = Field(None, description="MIME type, defaults to text/plain")
