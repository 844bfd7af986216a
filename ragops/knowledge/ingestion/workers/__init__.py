"""Ingestion worker entrypoints for external systems."""

from .base import BaseIngestionWorker
from .local import LocalDirectoryIngestor, LocalIngestResult
from .notion import NotionSyncWorker

__all__ = [
    "BaseIngestionWorker",
    "LocalDirectoryIngestor",
    "LocalIngestResult",
    "NotionSyncWorker",
]
