import asyncio
import hashlib
import re
from typing import Callable, List, Optional, Union

import pytest
from qdrant_client import AsyncQdrantClient

from skillvector.config import Settings
from skillvector.embeddings.embedding_service import EmbeddingService
from skillvector.errors import ProviderError
from skillvector.ranking.vector_index import PeopleVectorIndex
from skillvector.schemas.results import IndexedRecord, SearchCandidate
from skillvector.services.llm_service import LLMService

FAKE_DIM = 64


def run(coro):
    return asyncio.run(coro)


class FakeEmbeddingService(EmbeddingService):
    """Hashed bag-of-words with a heavy constant component, so every cosine is comfortably positive."""

    name = "fake"

    def __init__(self, dimension: int = FAKE_DIM, fail: bool = False) -> None:
        super().__init__("fake-bow", dimension)
        self.fail = fail
        self.calls: List[List[str]] = []

    async def _embed(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        if self.fail:
            raise ProviderError(self.name, "embedding backend down")
        vectors = []
        for text in texts:
            vec = [0.0] * self._dimension
            vec[0] = 3.0
            for token in re.findall(r"[a-z0-9]+", text.lower()):
                bucket = int(hashlib.md5(token.encode()).hexdigest(), 16) % (self._dimension - 1)
                vec[bucket + 1] += 1.0
            vectors.append(vec)
        return vectors


class FakeLLM(LLMService):
    """Returns canned answers (a string, or a callable of the user prompt); can be told to fail."""

    name = "fake-llm"

    def __init__(self, answer: Union[str, Callable[[str], str]] = "{}", fail: bool = False) -> None:
        self.answer = answer
        self.fail = fail
        self.calls: List[tuple] = []

    async def complete(self, system_prompt: str, user_prompt: str, temperature: float = 0.1) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self.fail:
            raise ProviderError(self.name, "model timed out")
        if callable(self.answer):
            return self.answer(user_prompt)
        return self.answer


class FakeIndex:
    """Stand-in for PeopleVectorIndex that serves fixed candidates and records each search."""

    collection = "fake"
    dimension = FAKE_DIM

    def __init__(self, candidates: Optional[List[SearchCandidate]] = None) -> None:
        self.candidates = sorted(candidates or [], key=lambda c: -c.raw_score)
        self.searches: List[dict] = []

    async def search(self, vector, limit, index_filter=None):
        self.searches.append({"limit": limit, "filter": index_filter})
        return self.candidates[:limit]

    async def scroll_all(self, limit=None):
        items = [IndexedRecord(id=c.id, payload=c.payload) for c in self.candidates]
        return items if limit is None else items[:limit]

    async def ensure_schema(self):
        return None

    async def ping(self):
        return True

    async def close(self):
        return None


def make_candidate(cid: str, score: float, role: str = "", skills: str = "", name: str = "") -> SearchCandidate:
    return SearchCandidate(
        id=cid,
        raw_score=score,
        payload={
            "data_name": name or cid,
            "data_role": role,
            "data_skills": skills,
            "content": f"{name or cid} is a {role}. Skills: {skills}.",
        },
    )


ADA = {
    "name": "Ada Lovelace",
    "role": "Software Engineer",
    "location": "London, UK",
    "skills": "Python, Algorithms",
    "experience": 5,
    "description": "Pioneer of computing who wrote the first published algorithm.",
}


@pytest.fixture
def settings():
    return Settings(embedding_provider="", llm_provider="", min_candidate_pool=50)


@pytest.fixture
def embedder():
    return FakeEmbeddingService()


@pytest.fixture
def memory_index():
    client = AsyncQdrantClient(location=":memory:")
    return PeopleVectorIndex(client, "people_test", FAKE_DIM)
