import hashlib

import pytest

from ragops.core.config import Settings
from ragops.core.context import RAGContext
from ragops.knowledge.ingestion.workers import LocalDirectoryIngestor


@pytest.fixture
def context(backend, metadata_store, query_cache, monitor, tmp_path):
    return RAGContext(
        backend=backend,
        metadata=metadata_store,
        cache=query_cache,
        monitor=monitor,
        settings=Settings(DOCS_DIRECTORY=tmp_path, QUERY_CACHE_MIN_CONFIDENCE=0.7),
    )


@pytest.mark.asyncio
async def test_restricted_file_is_skipped_and_notes_are_indexed(context, backend):
    indexer = context.indexer()

    assert await indexer.ingest("secrets.env", "API_KEY=abc") is None

    record = await indexer.ingest("notes.md", "Hello world")
    assert record.content_hash == hashlib.sha256(b"Hello world").hexdigest()
    assert [upload[0] for upload in backend.uploads] == ["notes.md"]


@pytest.mark.asyncio
async def test_index_then_query(context, backend, usage_collection):
    await context.indexer().ingest("policy.md", "Employees get 45 days of leave.")
    engine = context.query_engine()

    answer = await engine.process("How many days of leave?")
    repeat = await engine.process("how many days of leave?")

    assert "45 days" in answer.text
    assert repeat.cached is True
    assert [doc["kind"] for doc in usage_collection.documents] == ["ingest", "query", "query"]


@pytest.mark.asyncio
async def test_local_directory_ingestion(context, backend, tmp_path):
    (tmp_path / "guide.md").write_text("# Guide\n\nHow to deploy.", encoding="utf-8")
    (tmp_path / "plan.md").write_text("[CONFIDENTIAL] merger plan", encoding="utf-8")
    (tmp_path / "copy.md").write_text("# Guide\n\nHow to deploy.", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("not markdown", encoding="utf-8")

    results = await context.local_ingestor().run()

    assert [(result.file, result.status) for result in results] == [
        ("copy.md", "indexed"),
        ("guide.md", "indexed"),
        ("plan.md", "skipped"),
    ]
    assert results[0].document_id == results[1].document_id
    assert [upload[0] for upload in backend.uploads] == ["copy.md"]


@pytest.mark.asyncio
async def test_local_ingestion_reports_errors(indexer, backend, tmp_path):
    (tmp_path / "guide.md").write_text("How to deploy.", encoding="utf-8")
    backend.upload_error = RuntimeError("backend down")

    results = await LocalDirectoryIngestor(indexer, tmp_path).run()

    assert results[0].status == "error"
    assert "backend down" in results[0].error


@pytest.mark.asyncio
async def test_missing_directory(indexer, tmp_path):
    assert await LocalDirectoryIngestor(indexer, tmp_path / "missing").run() == []
