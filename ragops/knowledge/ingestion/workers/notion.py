"""Notion ingestion worker.

Discovers pages through cursor-paginated listings and syncs them one at a
time. Pages are never fetched concurrently: parallel calls against Notion's
rate limit only multiply 429 responses.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from ragops.core.config import Settings, settings as default_settings
from ragops.integrations.notion import MAX_PAGE_SIZE, NotionClient
from ragops.knowledge.ingestion.blocks import extract_title, render_blocks
from ragops.knowledge.ingestion.indexer import DocumentIndexer
from ragops.knowledge.ingestion.workers.base import BaseIngestionWorker
from ragops.models import DocumentRecord, SyncOptions, SyncRun

logger = logging.getLogger(__name__)

Lister = Callable[[Optional[str], int], Awaitable[Dict[str, Any]]]


class NotionSyncWorker(BaseIngestionWorker):
    source = "notion"

    def __init__(
        self,
        indexer: DocumentIndexer,
        client: NotionClient,
        *,
        config: Optional[Settings] = None,
    ) -> None:
        super().__init__(indexer)
        self.client = client
        self.settings = config or default_settings

    async def run(self) -> SyncRun:
        return await self.sync_all_accessible_pages()

    async def sync_page(self, page_id: str) -> Optional[DocumentRecord]:
        """Fetch, render and index a single page. Errors propagate."""

        logger.info("[NotionSync] Syncing page: %s", page_id)
        try:
            page = await self.client.retrieve_page(page_id)
            title = extract_title(page)
            blocks = await self.fetch_block_tree(page_id)
            body = render_blocks(blocks)
            content = f"# {title}\n\nSource: {page.get('url', '')}\n\n{body}"

            record = await self.process_document(f"notion_{page_id}.md", content, "text/markdown")
        except Exception as exc:
            logger.error("[NotionSync] Failed to sync page %s: %s", page_id, exc)
            raise

        if record is not None:
            logger.info("[NotionSync] Indexed page %s: %s", page_id, title)
        return record

    async def sync_all_accessible_pages(self, options: Optional[SyncOptions] = None) -> SyncRun:
        """Sync every page shared with the integration, up to `max_pages`."""

        options = options or SyncOptions(page_size=self.settings.SYNC_PAGE_SIZE)
        max_pages = options.max_pages or self.settings.SYNC_ALL_MAX_PAGES

        page_ids = await self._discover(
            lambda cursor, size: self.client.search_pages(start_cursor=cursor, page_size=size),
            page_size=options.page_size,
            max_pages=max_pages,
        )
        logger.info(
            "[NotionSync] Discovered %s accessible pages (max_pages=%s, page_size=%s, dry_run=%s)",
            len(page_ids),
            max_pages,
            options.page_size,
            options.dry_run,
        )
        return await self._sync_pages(page_ids, dry_run=options.dry_run)

    async def sync_database(self, database_id: str, options: Optional[SyncOptions] = None) -> SyncRun:
        """Sync every page of one database, up to `max_pages`."""

        options = options or SyncOptions(page_size=self.settings.SYNC_PAGE_SIZE)
        max_pages = options.max_pages or self.settings.SYNC_DATABASE_MAX_PAGES

        page_ids = await self._discover(
            lambda cursor, size: self.client.query_database(database_id, start_cursor=cursor, page_size=size),
            page_size=options.page_size,
            max_pages=max_pages,
        )
        logger.info(
            "[NotionSync] Discovered %s database pages (database_id=%s, max_pages=%s, page_size=%s, dry_run=%s)",
            len(page_ids),
            database_id,
            max_pages,
            options.page_size,
            options.dry_run,
        )
        run = await self._sync_pages(page_ids, dry_run=options.dry_run)
        run.database_id = database_id
        return run

    async def sync_databases(self, database_ids: Sequence[str], options: Optional[SyncOptions] = None) -> List[SyncRun]:
        runs: List[SyncRun] = []
        for database_id in database_ids:
            runs.append(await self.sync_database(database_id, options))
        return runs

    async def fetch_block_tree(self, block_id: str) -> List[Dict[str, Any]]:
        """All children of `block_id`, with nested children attached under `children`."""

        blocks = await self.fetch_block_children(block_id)
        for block in blocks:
            if block.get("has_children"):
                block["children"] = await self.fetch_block_tree(block["id"])
        return blocks

    async def fetch_block_children(self, block_id: str) -> List[Dict[str, Any]]:
        blocks: List[Dict[str, Any]] = []
        cursor: Optional[str] = None

        while True:
            response = await self.client.list_block_children(block_id, start_cursor=cursor, page_size=MAX_PAGE_SIZE)
            for result in response.get("results") or []:
                if isinstance(result, dict) and result.get("object") == "block":
                    blocks.append(result)

            cursor = response.get("next_cursor")
            if not response.get("has_more") or not cursor:
                break

        return blocks

    async def _discover(self, lister: Lister, *, page_size: int, max_pages: int) -> List[str]:
        # dict keeps discovery order while deduplicating
        page_ids: Dict[str, None] = {}
        cursor: Optional[str] = None

        while len(page_ids) < max_pages:
            response = await lister(cursor, page_size)
            for result in response.get("results") or []:
                if isinstance(result, dict) and result.get("object") == "page" and isinstance(result.get("id"), str):
                    page_ids[result["id"]] = None
                    if len(page_ids) >= max_pages:
                        break

            cursor = response.get("next_cursor")
            if not response.get("has_more") or not cursor:
                break

        return list(page_ids)

    async def _sync_pages(self, page_ids: Sequence[str], *, dry_run: bool) -> SyncRun:
        run = SyncRun(pages_discovered=len(page_ids))

        for page_id in page_ids:
            run.pages_attempted += 1
            if dry_run:
                continue
            try:
                await self.sync_page(page_id)
            except Exception:
                run.failed_page_ids.append(page_id)
            else:
                run.pages_succeeded += 1

        run.pages_failed = len(run.failed_page_ids)
        return run


__all__ = ["NotionSyncWorker"]
