"""Query and answer data model definitions."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ragops.models.document import utcnow

MIN_QUERY_LENGTH = 3
MAX_QUERY_LENGTH = 500
MIN_LIMIT = 1
MAX_LIMIT = 10
DEFAULT_LIMIT = 3


class QueryRequest(BaseModel):
    query: str = Field(..., min_length=MIN_QUERY_LENGTH, max_length=MAX_QUERY_LENGTH)
    limit: int = Field(DEFAULT_LIMIT, ge=MIN_LIMIT, le=MAX_LIMIT)


class DocumentSource(BaseModel):
    """Attribution for one retrieved passage."""

    document_id: str
    filename: str
    snippet: str = ""
    relevance: float = Field(0.0, ge=0.0, le=1.0)
    source_url: Optional[str] = None


class QueryAnswer(BaseModel):
    text: str
    sources: List[DocumentSource] = Field(default_factory=list)
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    cached: bool = False
    elapsed_ms: int = 0
    errored: bool = False


class CacheEntry(BaseModel):
    query_key: str
    result: QueryAnswer
    hit_count: int = 1
    created_at: datetime = Field(default_factory=utcnow)
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at
