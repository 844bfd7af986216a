"""Workspace synchronisation trigger."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ragops.api.dependencies import get_context
from ragops.api.security import require_admin
from ragops.core.context import RAGContext
from ragops.models import SyncRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rag", tags=["sync"], dependencies=[Depends(require_admin)])


@router.post("/sync")
async def sync_workspace(request: SyncRequest, context: RAGContext = Depends(get_context)) -> Dict[str, Any]:
    """Sync one page, one or more databases, or every page shared with the integration."""

    worker = context.notion_worker()
    options = request.options(context.settings.SYNC_PAGE_SIZE)

    if request.page_id:
        if request.dry_run:
            return {"mode": "page", "page_id": request.page_id, "dry_run": True}
        record = await worker.sync_page(request.page_id)
        return {
            "mode": "page",
            "page_id": request.page_id,
            "document": record.model_dump(mode="json") if record else None,
        }

    if request.database_ids:
        runs = await worker.sync_databases(request.database_ids, options)
        return {"mode": "databases", "runs": [run.model_dump() for run in runs]}

    if request.database_id:
        run = await worker.sync_database(request.database_id, options)
        return {"mode": "database", "run": run.model_dump()}

    logger.info("Syncing all accessible pages (max_pages=%s)", options.max_pages)
    run = await worker.sync_all_accessible_pages(options)
    return {"mode": "all", "run": run.model_dump()}
