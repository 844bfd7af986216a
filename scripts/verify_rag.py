#!/usr/bin/env python
"""
Index a sample policy document and ask a question about it end to end.

Usage:
    python scripts/verify_rag.py
"""

from __future__ import annotations

import asyncio
import logging

from ragops.core.context import build_context
from ragops.core.database import database_manager
from ragops.core.observability import setup_tracing

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("ragops.verify")

SAMPLE_FILENAME = "enterprise-policy-v5.txt"
SAMPLE_CONTENT = (
    "The Enterprise policy v5 states that all employees are entitled to 45 days of annual leave "
    "and a monthly wellness stipend of $500."
)
SAMPLE_QUERY = "How many days of annual leave do employees get in policy v5?"


async def main() -> None:
    setup_tracing()
    await database_manager.initialize()
    context = build_context(database_manager)
    try:
        record = await context.indexer().ingest(SAMPLE_FILENAME, SAMPLE_CONTENT)
        logger.info("Indexed sample document: %s", record.id if record else None)

        answer = await context.query_engine(use_cache=False).process(SAMPLE_QUERY)
        logger.info("Answer (confidence %.2f): %s", answer.confidence, answer.text)
        if answer.errored:
            logger.error("Query returned an error result.")
        elif "45" in answer.text:
            logger.info("Query grounded on the sample document.")
        else:
            logger.warning("Unexpected answer. Check the model output and vector store contents.")
    finally:
        await context.aclose()
        await database_manager.close()


if __name__ == "__main__":
    asyncio.run(main())
