import json

import pytest
from conftest import ADA, FakeEmbeddingService, FakeIndex, FakeLLM
from fastapi.testclient import TestClient
from qdrant_client import AsyncQdrantClient

from skillvector.app import create_app
from skillvector.errors import VectorIndexError
from skillvector.ranking.vector_index import PeopleVectorIndex
from skillvector.runtime import SearchRuntime

ADA_CSV = (
    "name,role,location,skills,experience,description,email\n"
    'Ada Lovelace,Software Engineer,"London, UK","Python, Algorithms",5,'
    "Pioneer of computing who wrote the first published algorithm.,ada@example.com\n"
)


def _answer(prompt: str) -> str:
    if prompt.startswith("Query:") and "Results (" in prompt:
        return "Found one software engineer in London."
    return "{}"


def _client(settings, embedder=None, index=None, llm=None):
    index = index or PeopleVectorIndex(AsyncQdrantClient(location=":memory:"), "people_api", 64)
    runtime = SearchRuntime(settings, embedder or FakeEmbeddingService(), index, llm)
    return TestClient(create_app(runtime))


def _upload(client, content=ADA_CSV, name="people.csv", data_type="csv"):
    return client.post("/upload", params={"type": data_type}, files={"file": (name, content, "text/plain")})


def test_health(settings):
    with _client(settings) as client:
        resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["services"] == {"vectorIndex": "connected", "embedding": "fake", "languageModel": "unconfigured"}
    assert body["uptime"] >= 0


def test_upload_then_duplicate_upload(settings):
    with _client(settings) as client:
        first = _upload(client)
        second = _upload(client)
    assert first.status_code == 200
    data = first.json()["data"]
    assert data["fileName"] == "people.csv"
    assert data["dataType"] == "csv"
    assert data["storedInQdrant"] is True
    assert data["alreadyExists"] is False
    assert data["processedData"][0]["name"] == "Ada Lovelace"
    assert second.json()["data"]["alreadyExists"] is True
    assert "already" in second.json()["message"]


def test_search_returns_people_and_sources(settings):
    with _client(settings, llm=FakeLLM(_answer)) as client:
        _upload(client)
        resp = client.get("/search", params={"query": "python developers", "limit": 5})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["query"] == "python developers"
    assert body["answer"] == "Found one software engineer in London."
    assert body["total"] == 1
    assert body["limit"] == 5
    assert body["offset"] == 0
    assert body["hasMore"] is False
    person = body["people"][0]
    assert person["name"] == "Ada Lovelace"
    assert person["experience_years"] == 5.0
    assert person["email"] == "ada@example.com"
    assert 0.3 <= person["relevanceScore"] <= 1.0
    assert person["rawContent"].startswith("Ada Lovelace is a Software Engineer")
    assert body["sources"][0]["metadata"]["personHash"]


def test_search_requires_query(settings):
    with _client(settings) as client:
        resp = client.get("/search")
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert resp.json()["error"] == "Query parameter is required"


def test_malformed_paging_uses_common_error_body(settings):
    with _client(settings) as client:
        search = client.get("/search", params={"query": "python", "limit": "ten"})
        people = client.get("/people", params={"limit": "all"})
    for resp in (search, people):
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "Invalid request parameters"
        assert "limit" in body["details"]
        assert "timestamp" in body


def test_empty_index_gives_canned_answer(settings):
    with _client(settings) as client:
        body = client.get("/search", params={"query": "astronauts"}).json()
    assert body["people"] == []
    assert body["answer"] == "I couldn't find any people matching your criteria."


def test_people_listing(settings):
    grace = {**ADA, "name": "Grace Hopper", "skills": "COBOL"}
    with _client(settings) as client:
        _upload(client, json.dumps([ADA, grace]), name="people.json", data_type="json")
        resp = client.get("/people", params={"limit": 10})
    body = resp.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert {p["name"] for p in body["people"]} == {"Ada Lovelace", "Grace Hopper"}


@pytest.mark.parametrize(
    "content,name,data_type",
    [
        (ADA_CSV, "people.json", "csv"),
        (ADA_CSV, "people.csv", "xml"),
        ("{broken", "people.json", "json"),
        ("single column\nvalue", "people.csv", "csv"),
        ("   ", "bio.txt", "text"),
    ],
)
def test_upload_rejects_mismatched_files(settings, content, name, data_type):
    with _client(settings) as client:
        resp = _upload(client, content, name=name, data_type=data_type)
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_text_upload_without_model_uses_patterns(settings):
    bio = (
        "Marie Curie is a Research Scientist from Paris, France.\n"
        "Skills: Chemistry, Physics. She has 25 years of experience.\n"
    )
    with _client(settings, llm=FakeLLM(_answer)) as client:
        resp = _upload(client, bio, name="marie.md", data_type="text")
    data = resp.json()["data"]
    assert data["storedInQdrant"] is True
    assert data["processedData"][0]["location"] == "Paris, France"


def test_embedding_failure_maps_to_502(settings):
    with _client(settings, embedder=FakeEmbeddingService(fail=True)) as client:
        resp = client.get("/search", params={"query": "python"})
    assert resp.status_code == 502
    assert resp.json()["success"] is False


class _DownIndex(FakeIndex):
    dimension = 64

    async def search(self, vector, limit, index_filter=None):
        raise VectorIndexError("connection refused")


def test_index_failure_maps_to_503(settings):
    with _client(settings, index=_DownIndex()) as client:
        resp = client.get("/search", params={"query": "python"})
    assert resp.status_code == 503
    assert "connection refused" in resp.json()["details"]
