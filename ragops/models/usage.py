from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ragops.models.document import utcnow


class UsageKind(str, Enum):
    INGEST = "ingest"
    QUERY = "query"


class UsageEvent(BaseModel):
    """Append-only record of one ingestion or query."""

    model_config = ConfigDict(frozen=True)

    kind: UsageKind
    token_estimate: int = Field(0, ge=0)
    latency_ms: Optional[int] = Field(None, ge=0)
    success: bool
    timestamp: datetime = Field(default_factory=utcnow)
    metadata: Dict[str, Any] = Field(default_factory=dict)
