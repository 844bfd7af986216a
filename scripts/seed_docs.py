"""Index the Markdown files under the configured docs directory."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from ragops.core.context import build_context
from ragops.core.database import database_manager

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main(directory: Path | None = None) -> None:
    await database_manager.initialize()
    context = build_context(database_manager)
    try:
        results = await context.local_ingestor(directory).run()
    finally:
        await context.aclose()
        await database_manager.close()

    for result in results:
        if result.status == "error":
            logger.error("%s: %s", result.file, result.error)
        else:
            logger.info("%s: %s", result.file, result.status)


if __name__ == "__main__":
    asyncio.run(main(Path(sys.argv[1]) if len(sys.argv) > 1 else None))
