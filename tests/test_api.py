"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from grounding.engine import get_engine
from grounding.main import app

ADMIN = {"X-Admin-Token": "admin-secret"}


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_status_before_ingestion(client):
    response = client.get("/api/v1/status")

    assert response.status_code == 200
    body = response.json()
    assert body["corpus_loaded"] is False
    assert body["chunks_loaded"] == 0
    assert body["embedding_model"] == "bag-of-words"
    assert body["ingestion"]["status"] == "not_started"


def test_ingest_requires_admin_token(client):
    assert client.post("/admin/ingest", json={}).status_code == 403
    assert client.post("/admin/ingest", json={}, headers={"X-Admin-Token": "wrong"}).status_code == 403
    assert client.post("/admin/cache/clear").status_code == 403


def test_ingest_then_already_processed(client):
    first = client.post("/admin/ingest", json={}, headers=ADMIN)
    assert first.status_code == 200
    body = first.json()
    assert body["result"] == "processed"
    assert body["status"] == "ready"
    assert body["chunks"] == body["embeddings"] == 2

    second = client.post("/admin/ingest", json={}, headers=ADMIN)
    assert second.json()["result"] == "already_processed"

    status = client.get("/api/v1/status").json()
    assert status["corpus_loaded"] is True
    assert status["corpus_version"] == 1
    assert status["ingestion"]["last_processed"] is not None


def test_ingest_missing_document_is_unprocessable(client, tmp_path):
    response = client.post("/admin/ingest", json={"document_path": str(tmp_path / "absent.txt")}, headers=ADMIN)

    assert response.status_code == 422
    assert response.json()["detail"]["reason"] == "extraction_failed"
    assert client.get("/api/v1/status").json()["ingestion"]["status"] == "failed"


def test_search_returns_indexed_hits(client):
    client.post("/admin/ingest", json={}, headers=ADMIN)

    response = client.post("/api/v1/search", json={"query": "career"})

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "indexed"
    assert body["low_confidence"] is False
    assert body["results"][0]["content"] == "Jupiter brings career growth."
    assert body["results"][0]["relevance"] == 1.0


def test_search_without_corpus_is_low_confidence(client):
    body = client.post("/api/v1/search", json={"query": "career"}).json()

    assert body["source"] == "static_default"
    assert body["low_confidence"] is True
    assert body["results"]


def test_blank_search_is_rejected(client):
    assert client.post("/api/v1/search", json={"query": "   "}).status_code == 400
    assert client.post("/api/v1/search", json={"query": ""}).status_code == 422


def test_reading(client):
    client.post("/admin/ingest", json={}, headers=ADMIN)

    response = client.post(
        "/api/v1/reading",
        json={"question": "How is my career?", "kundliData": {"name": "Anita"}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["answer"] == "A grounded reading."
    assert body["metadata"]["source"] == "indexed"
    assert body["metadata"]["model"] == "fake-llm"


def test_reading_generation_failure_is_bad_gateway(client, fake_llm):
    fake_llm.error = ConnectionError("upstream closed")

    response = client.post("/api/v1/reading", json={"question": "career"})

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["reason"] == "generation_failed"
    assert detail["metadata"]["source"] == "static_default"


def test_cache_clear_reports_entries(client):
    client.post("/admin/ingest", json={}, headers=ADMIN)
    client.post("/api/v1/search", json={"query": "career"})
    client.post("/api/v1/search", json={"query": "saturn delay"})

    response = client.post("/admin/cache/clear", headers=ADMIN)

    assert response.status_code == 200
    assert response.json() == {"cleared": 2}
    assert client.get("/api/v1/status").json()["cache_size"] == 0
