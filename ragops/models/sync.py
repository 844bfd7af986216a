"""Workspace synchronisation request and result models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

MAX_PAGE_SIZE = 100


class SyncOptions(BaseModel):
    """Bounds for one discovery run.

    `max_pages` is a hard cap on discovered pages; `None` selects the default
    of the calling operation.
    """

    max_pages: Optional[int] = Field(None, ge=1)
    page_size: int = Field(50, ge=1, le=MAX_PAGE_SIZE)
    dry_run: bool = False


class SyncRun(BaseModel):
    pages_discovered: int = 0
    pages_attempted: int = 0
    pages_succeeded: int = 0
    pages_failed: int = 0
    failed_page_ids: List[str] = Field(default_factory=list)
    database_id: Optional[str] = None


class SyncRequest(BaseModel):
    """Trigger payload accepted by the sync endpoint."""

    page_id: Optional[str] = None
    database_id: Optional[str] = None
    database_ids: Optional[List[str]] = None
    sync_all: bool = False
    max_pages: Optional[int] = Field(None, ge=1)
    page_size: Optional[int] = Field(None, ge=1, le=MAX_PAGE_SIZE)
    dry_run: bool = False

    @model_validator(mode="after")
    def _require_target(self) -> "SyncRequest":
        if not (self.page_id or self.database_id or self.database_ids or self.sync_all):
            raise ValueError("Provide page_id, database_id, database_ids or set sync_all=true")
        return self

    def options(self, default_page_size: int = 50) -> SyncOptions:
        return SyncOptions(
            max_pages=self.max_pages,
            page_size=self.page_size or default_page_size,
            dry_run=self.dry_run,
        )
