from .document import DocumentRecord, IndexRequest
from .query import CacheEntry, DocumentSource, QueryAnswer, QueryRequest
from .sync import SyncOptions, SyncRequest, SyncRun
from .usage import UsageEvent, UsageKind

__all__ = [
    "CacheEntry",
    "DocumentRecord",
    "DocumentSource",
    "IndexRequest",
    "QueryAnswer",
    "QueryRequest",
    "SyncOptions",
    "SyncRequest",
    "SyncRun",
    "UsageEvent",
    "UsageKind",
]
