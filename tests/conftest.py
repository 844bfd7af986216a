import pytest

from ragops.knowledge.ingestion.indexer import DocumentIndexer
from ragops.knowledge.retrieval.cache import QueryCache
from ragops.knowledge.search.backend import GeneratedAnswer
from ragops.models import DocumentSource
from ragops.utils.monitoring import UsageMonitor


class InMemoryMetadataStore:
    def __init__(self):
        self.records = {}
        self.lookups = 0
        self.fail_lookup = False
        self.fail_save = False

    async def find_by_content_hash(self, content_hash):
        self.lookups += 1
        if self.fail_lookup:
            raise ConnectionError("metadata store offline")
        for record in self.records.values():
            if record.content_hash == content_hash:
                return record
        return None

    async def save(self, record):
        if self.fail_save:
            raise ConnectionError("metadata store offline")
        self.records[record.id] = record

    async def recent(self, limit):
        ordered = sorted(self.records.values(), key=lambda record: record.indexed_at, reverse=True)
        return ordered[:limit]


class FakeBackend:
    def __init__(self, text="The policy grants 45 days of leave.", confidence=0.9):
        self.uploads = []
        self.queries = []
        self.upload_error = None
        self.generate_error = None
        self.text = text
        self.confidence = confidence

    async def upload(self, data, mime_type, display_name):
        if self.upload_error is not None:
            raise self.upload_error
        self.uploads.append((display_name, data, mime_type))
        return f"file-{len(self.uploads)}"

    async def generate(self, query, limit=3):
        self.queries.append((query, limit))
        if self.generate_error is not None:
            raise self.generate_error
        sources = [
            DocumentSource(document_id="doc-policy", filename="policy.md", snippet="45 days", relevance=self.confidence)
        ]
        return GeneratedAnswer(text=self.text, confidence=self.confidence, sources=sources)


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.expiries = {}
        self.fail = False

    async def get(self, key):
        if self.fail:
            raise ConnectionError("redis offline")
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self.fail:
            raise ConnectionError("redis offline")
        self.store[key] = value
        self.expiries[key] = ex

    async def delete(self, key):
        self.store.pop(key, None)
        self.expiries.pop(key, None)


class _AsyncRows:
    def __init__(self, rows):
        self._rows = iter(rows)

    def __aiter__(self):
        return self

    async def __anext__(self):
        try:
            return next(self._rows)
        except StopIteration:
            raise StopAsyncIteration


class RecordingCollection:
    def __init__(self):
        self.documents = []
        self.fail = False
        self.pipelines = []

    async def insert_one(self, document):
        if self.fail:
            raise ConnectionError("usage store offline")
        self.documents.append(document)

    def aggregate(self, pipeline):
        self.pipelines.append(pipeline)
        since = pipeline[0]["$match"]["timestamp"]["$gte"]
        total = sum(doc["token_estimate"] for doc in self.documents if doc["timestamp"] >= since)
        return _AsyncRows([{"_id": None, "tokens": total}] if self.documents else [])


@pytest.fixture
def metadata_store():
    return InMemoryMetadataStore()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def usage_collection():
    return RecordingCollection()


@pytest.fixture
def monitor(usage_collection):
    return UsageMonitor(usage_collection, latency_threshold_ms=5000, daily_token_limit=1_000_000)


@pytest.fixture
def query_cache(fake_redis):
    return QueryCache(fake_redis, ttl_seconds=86400)


@pytest.fixture
def indexer(backend, metadata_store, monitor):
    return DocumentIndexer(backend=backend, metadata=metadata_store, monitor=monitor, redact_pii=False)
