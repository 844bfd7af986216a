import logging

import pytest
from fastapi.testclient import TestClient

from ragops.api.main import app
from ragops.api.middleware.logging import rag_operation
from ragops.core.config import Settings, get_settings
from ragops.core.context import RAGContext

API_KEY = "test-admin-key"


@pytest.fixture
def client(backend, metadata_store, query_cache, monitor, tmp_path):
    config = Settings(ADMIN_API_KEY=API_KEY, DOCS_DIRECTORY=tmp_path)
    app.state.rag = RAGContext(
        backend=backend,
        metadata=metadata_store,
        cache=query_cache,
        monitor=monitor,
        settings=config,
    )
    app.dependency_overrides[get_settings] = lambda: config
    # No context manager: the lifespan would connect to real databases.
    yield TestClient(app)
    app.dependency_overrides.clear()


def _headers():
    return {"X-API-Key": API_KEY}


def test_requests_without_key_are_rejected(client):
    response = client.post("/api/rag/query", json={"query": "What is the policy?"})
    assert response.status_code == 401

    response = client.post("/api/rag/query", json={"query": "What is the policy?"}, headers={"X-API-Key": "wrong"})
    assert response.status_code == 401


def test_query(client, backend):
    response = client.post("/api/rag/query", json={"query": "What is the policy?", "limit": 2}, headers=_headers())

    assert response.status_code == 200
    body = response.json()
    assert body["cached"] is False
    assert body["sources"][0]["filename"] == "policy.md"
    assert backend.queries == [("What is the policy?", 2)]


def test_query_validation(client):
    response = client.post("/api/rag/query", json={"query": "hi"}, headers=_headers())
    assert response.status_code == 422


def test_index_document(client, backend):
    response = client.post("/api/rag/index", json={"filename": "notes.md", "content": "Hello world"}, headers=_headers())

    assert response.status_code == 200
    assert response.json()["filename"] == "notes.md"
    assert response.json()["tags"] == ["api"]
    assert len(backend.uploads) == 1


def test_index_restricted_document(client, backend):
    response = client.post("/api/rag/index", json={"filename": "secrets.env", "content": "KEY=1"}, headers=_headers())

    assert response.status_code == 400
    assert backend.uploads == []


def test_index_upload_failure_maps_to_bad_gateway(client, backend):
    backend.upload_error = RuntimeError("quota exceeded")

    response = client.post("/api/rag/index", json={"filename": "notes.md", "content": "Hello world"}, headers=_headers())

    assert response.status_code == 502
    assert response.json()["code"] == "ingestion_failed"


def test_index_docs(client, tmp_path):
    (tmp_path / "guide.md").write_text("How to deploy.", encoding="utf-8")

    response = client.post("/api/rag/index-docs", headers=_headers())

    assert response.status_code == 200
    assert response.json()["indexed"] == 1
    assert response.json()["results"][0]["file"] == "guide.md"


def test_status(client):
    client.post("/api/rag/index", json={"filename": "notes.md", "content": "Hello world"}, headers=_headers())

    response = client.get("/api/rag/status", headers=_headers())

    assert response.status_code == 200
    body = response.json()
    assert [doc["filename"] for doc in body["recent_documents"]] == ["notes.md"]
    assert body["tokens_today"] == 2
    assert body["configured"]["notion"] is False


def test_sync_requires_a_target(client):
    response = client.post("/api/rag/sync", json={"dry_run": True}, headers=_headers())
    assert response.status_code == 422


def test_request_logging_tags_pipeline_operations(client, caplog):
    caplog.set_level(logging.INFO, logger="ragops.api")

    health = client.get("/health")
    response = client.post("/api/rag/query", json={"query": "What is the policy?"}, headers=_headers())

    assert health.status_code == 200
    assert "X-Response-Time-Ms" not in health.headers
    assert "X-Response-Time-Ms" in response.headers

    records = [record for record in caplog.records if record.name == "ragops.api"]
    assert [record.path for record in records] == ["/api/rag/query"]
    assert records[0].operation == "query"
    assert records[0].authenticated is True
    assert records[0].status == 200


def test_rag_operation_names():
    assert rag_operation("/api/rag/index-docs") == "index-docs"
    assert rag_operation("/api/rag/") is None
    assert rag_operation("/health") is None
