from typing import List

import pytest
from conftest import run

from skillvector.config import Settings
from skillvector.embeddings.embedding_service import (
    EmbeddingService,
    HuggingFaceEmbeddingService,
    OllamaEmbeddingService,
    OpenAIEmbeddingService,
    SentenceTransformersEmbeddingService,
    get_embedding_service,
)
from skillvector.errors import ProviderError
from skillvector.services.llm_service import OllamaChatService, OpenAIChatService, get_llm_service


class _Static(EmbeddingService):
    name = "static"

    def __init__(self, vectors, dimension=3):
        super().__init__("static", dimension)
        self._vectors = vectors

    async def _embed(self, texts: List[str]) -> List[List[float]]:
        return self._vectors[: len(texts)]


class _Boom(EmbeddingService):
    name = "boom"

    async def _embed(self, texts):
        raise RuntimeError("connection reset")


def test_priority_prefers_openai():
    service = get_embedding_service(Settings(openai_api_key="sk-x", huggingface_api_key="hf", ollama_base_url="http://o"))
    assert isinstance(service, OpenAIEmbeddingService)
    assert service.dimension == 3072


def test_priority_falls_through_by_credentials():
    assert isinstance(get_embedding_service(Settings(huggingface_api_key="hf")), HuggingFaceEmbeddingService)
    ollama = get_embedding_service(Settings(ollama_base_url="http://localhost:11434"))
    assert isinstance(ollama, OllamaEmbeddingService)
    assert ollama.dimension == 1024
    local = get_embedding_service(Settings())
    assert isinstance(local, SentenceTransformersEmbeddingService)
    assert local.dimension == 384


def test_explicit_provider_and_dimension_override():
    service = get_embedding_service(
        Settings(openai_api_key="sk-x", embedding_provider="ollama", ollama_base_url="http://o", embedding_dimension=768)
    )
    assert isinstance(service, OllamaEmbeddingService)
    assert service.dimension == 768


def test_unknown_provider_is_rejected():
    with pytest.raises(ValueError):
        get_embedding_service(Settings(embedding_provider="word2vec"))


def test_embed_preserves_order_and_checks_dimension():
    service = _Static([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    assert run(service.embed(["a", "b"])) == [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]]
    assert run(service.embed([])) == []
    with pytest.raises(ProviderError, match="dimension"):
        run(_Static([[1.0, 0.0]]).embed(["a"]))
    with pytest.raises(ProviderError, match="expected 2 vectors"):
        run(_Static([[1.0, 0.0, 0.0]]).embed(["a", "b"]))


def test_backend_errors_surface_as_provider_error():
    with pytest.raises(ProviderError) as info:
        run(_Boom("m", 3).embed_text("hello"))
    assert info.value.provider == "boom"


def test_llm_selection():
    assert isinstance(get_llm_service(Settings(openai_api_key="sk-x", ollama_base_url="http://o")), OpenAIChatService)
    assert isinstance(get_llm_service(Settings(ollama_base_url="http://o")), OllamaChatService)
    assert get_llm_service(Settings()) is None
    forced = get_llm_service(Settings(openai_api_key="sk-x", ollama_base_url="http://o", llm_provider="ollama"))
    assert isinstance(forced, OllamaChatService)


def test_dimension_follows_configured_model():
    small = get_embedding_service(Settings(openai_api_key="sk-x", openai_embedding_model="text-embedding-3-small"))
    assert small.dimension == 1536
    mpnet = get_embedding_service(Settings(sentence_transformers_model="all-mpnet-base-v2"))
    assert mpnet.dimension == 768


def test_unknown_remote_model_needs_explicit_dimension():
    with pytest.raises(ValueError, match="EMBEDDING_DIMENSION"):
        get_embedding_service(Settings(ollama_base_url="http://o", ollama_embedding_model="my-embedder"))
    sized = get_embedding_service(
        Settings(ollama_base_url="http://o", ollama_embedding_model="my-embedder", embedding_dimension=512)
    )
    assert sized.dimension == 512


class _LoadedModel:
    def get_sentence_embedding_dimension(self):
        return 256


def test_unknown_local_model_reports_its_own_dimension():
    service = get_embedding_service(Settings(sentence_transformers_model="acme/tiny-encoder"))
    assert isinstance(service, SentenceTransformersEmbeddingService)
    service._st_model = _LoadedModel()
    assert service.dimension == 256
