"""Initial setup script for RAGOps infrastructure."""

from __future__ import annotations

import asyncio
import logging

from ragops.core.context import build_context
from ragops.core.database import database_manager

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main() -> None:
    await database_manager.initialize()
    context = build_context(database_manager)
    try:
        await context.metadata.ensure_indexes()
        await context.monitor.ensure_indexes()
        store_id = await context.backend.store_id()
        logger.info("Using vector store %s", store_id)
    finally:
        await context.aclose()
        await database_manager.close()
    logger.info("RAGOps setup complete")


if __name__ == "__main__":
    asyncio.run(main())
