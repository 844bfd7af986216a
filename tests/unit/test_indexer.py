import logging

import pytest

from ragops.core.exceptions import IngestionError
from ragops.knowledge.ingestion.indexer import DocumentIndexer, estimate_tokens
from ragops.knowledge.ingestion.security import document_id_for, fingerprint


@pytest.mark.asyncio
async def test_identical_content_is_uploaded_once(indexer, backend, metadata_store):
    first = await indexer.ingest("handbook.md", "Vacation policy: 45 days.")
    second = await indexer.ingest("handbook-copy.md", "Vacation policy: 45 days.")

    assert len(backend.uploads) == 1
    assert first is not None and second is not None
    assert second.id == first.id
    assert second.filename == "handbook.md"
    assert list(metadata_store.records) == [document_id_for("handbook.md")]


@pytest.mark.asyncio
async def test_filtered_document_returns_none_without_io(indexer, backend, metadata_store, usage_collection):
    result = await indexer.ingest("secrets.env", "API_KEY=abc")

    assert result is None
    assert backend.uploads == []
    assert metadata_store.lookups == 0
    assert usage_collection.documents == []


@pytest.mark.asyncio
async def test_record_fields(indexer, backend):
    content = "x" * 41
    record = await indexer.ingest("notes.md", content, "text/markdown", tags=["local"])

    assert record.locator == "file-1"
    assert record.content_hash == fingerprint(content)
    assert record.token_estimate == estimate_tokens(content) == 10
    assert record.mime_type == "text/markdown"
    assert record.tags == ["local"]
    assert backend.uploads[0] == ("notes.md", content.encode("utf-8"), "text/markdown")


@pytest.mark.asyncio
async def test_upload_failure_raises_and_records_failed_event(indexer, backend, metadata_store, usage_collection):
    backend.upload_error = RuntimeError("quota exceeded")

    with pytest.raises(IngestionError) as excinfo:
        await indexer.ingest("notes.md", "Hello world")

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert metadata_store.records == {}
    assert len(usage_collection.documents) == 1
    assert usage_collection.documents[0]["success"] is False
    assert usage_collection.documents[0]["kind"] == "ingest"


@pytest.mark.asyncio
async def test_metadata_failures_do_not_block_indexing(indexer, backend, metadata_store, usage_collection):
    metadata_store.fail_lookup = True
    metadata_store.fail_save = True

    record = await indexer.ingest("notes.md", "Hello world")

    assert record is not None
    assert len(backend.uploads) == 1
    assert usage_collection.documents[-1]["success"] is True


@pytest.mark.asyncio
async def test_personal_data_is_flagged(indexer, backend, caplog):
    caplog.set_level(logging.WARNING, logger="ragops.knowledge.ingestion.indexer")

    record = await indexer.ingest("contacts.md", "Ask jane.doe@example.com")

    assert "appears to contain personal data" in caplog.text
    assert backend.uploads[0][1] == b"Ask jane.doe@example.com"
    assert record.content_hash == fingerprint("Ask jane.doe@example.com")


@pytest.mark.asyncio
async def test_personal_data_is_redacted_when_enabled(backend, metadata_store, monitor):
    indexer = DocumentIndexer(backend=backend, metadata=metadata_store, monitor=monitor, redact_pii=True)

    record = await indexer.ingest("contacts.md", "Ask jane.doe@example.com, SSN 123-45-6789")

    expected = "Ask [REDACTED_EMAIL], SSN [REDACTED_SSN]"
    assert backend.uploads[0][1] == expected.encode("utf-8")
    assert record.content_hash == fingerprint(expected)
