"""Embedding gateway: embed texts via OpenAI, Hugging Face, Ollama or local SentenceTransformers."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import httpx
from openai import AsyncOpenAI

from skillvector.config import EMBEDDING_MODEL_DIMENSIONS, EMBEDDING_PRESETS, EMBEDDING_PRIORITY, Settings
from skillvector.errors import ProviderError
from skillvector.utils.logger import get_logger

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract embedding provider."""

    name: str = "embedding"

    def __init__(self, model: str, dimension: Optional[int]) -> None:
        self._model = model
        self._dimension = dimension

    @property
    def model(self) -> str:
        return self._model

    @property
    def dimension(self) -> int:
        """Declared embedding dimension; must match the collection's vector size."""
        return self._dimension

    @abstractmethod
    async def _embed(self, texts: List[str]) -> List[List[float]]:
        ...

    async def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed multiple texts. One vector per input, same order."""
        if not texts:
            return []
        cleaned = [t.strip() if t and t.strip() else " " for t in texts]
        try:
            vectors = await self._embed(cleaned)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(self.name, str(e)) from e
        if len(vectors) != len(cleaned):
            raise ProviderError(self.name, f"expected {len(cleaned)} vectors, got {len(vectors)}")
        dimension = self.dimension
        for vec in vectors:
            if len(vec) != dimension:
                raise ProviderError(
                    self.name, f"vector length {len(vec)} does not match dimension {dimension}"
                )
        return vectors

    async def embed_text(self, text: str) -> List[float]:
        """Embed a single text. Returns a vector of floats."""
        return (await self.embed([text]))[0]


class OpenAIEmbeddingService(EmbeddingService):
    """OpenAI embeddings API (e.g. text-embedding-3-large)."""

    name = "openai"

    def __init__(self, api_key: str, model: str, dimension: int, timeout: float = 30.0) -> None:
        super().__init__(model, dimension)
        self._client = AsyncOpenAI(api_key=api_key, timeout=timeout)

    async def _embed(self, texts: List[str]) -> List[List[float]]:
        resp = await self._client.embeddings.create(model=self._model, input=texts)
        by_idx = {d.index: d.embedding for d in resp.data}
        return [by_idx[i] for i in range(len(texts))]


def _mean_pool(rows: List[List[float]]) -> List[float]:
    width = len(rows[0])
    return [sum(row[i] for row in rows) / len(rows) for i in range(width)]


class HuggingFaceEmbeddingService(EmbeddingService):
    """Hugging Face Inference API feature-extraction pipeline (e.g. BAAI/bge-large-en-v1.5)."""

    name = "huggingface"

    def __init__(self, api_key: str, model: str, dimension: int, base_url: str, timeout: float = 30.0) -> None:
        super().__init__(model, dimension)
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/{model}/pipeline/feature-extraction"
        self._timeout = timeout

    async def _embed(self, texts: List[str]) -> List[List[float]]:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(self._url, json={"inputs": texts}, headers=headers)
            resp.raise_for_status()
            data: Any = resp.json()
        vectors: List[List[float]] = []
        for item in data:
            # Token-level output comes back as a matrix; pool it to one vector
            if item and isinstance(item[0], list):
                vectors.append(_mean_pool(item))
            else:
                vectors.append([float(x) for x in item])
        return vectors


class OllamaEmbeddingService(EmbeddingService):
    """Local Ollama server via /api/embed (e.g. mxbai-embed-large)."""

    name = "ollama"

    def __init__(self, base_url: str, model: str, dimension: int, timeout: float = 30.0) -> None:
        super().__init__(model, dimension)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def _embed(self, texts: List[str]) -> List[List[float]]:
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(
                f"{self._base_url}/api/embed", json={"model": self._model, "input": texts}
            )
            resp.raise_for_status()
            data = resp.json()
        return data.get("embeddings") or []


class SentenceTransformersEmbeddingService(EmbeddingService):
    """Local embeddings via SentenceTransformers (e.g. all-MiniLM-L6-v2)."""

    name = "sentence_transformers"

    def __init__(self, model: str, dimension: Optional[int] = None) -> None:
        super().__init__(model, dimension)
        self._st_model = None

    @property
    def dimension(self) -> int:
        """Configured size, or the loaded model's own output size."""
        if self._dimension is None:
            self._dimension = self._get_model().get_sentence_embedding_dimension()
        return self._dimension

    def _get_model(self):
        if self._st_model is None:
            from sentence_transformers import SentenceTransformer

            self._st_model = SentenceTransformer(self._model)
            logger.info("Loaded SentenceTransformer model: %s", self._model)
        return self._st_model

    def _encode(self, texts: List[str]) -> List[List[float]]:
        matrix = self._get_model().encode(texts, convert_to_numpy=True)
        return matrix.tolist()

    async def _embed(self, texts: List[str]) -> List[List[float]]:
        # encode() is CPU-bound; keep it off the event loop
        return await asyncio.to_thread(self._encode, texts)


def _usable(provider: str, settings: Settings) -> bool:
    if provider == "openai":
        return bool(settings.openai_api_key)
    if provider == "huggingface":
        return bool(settings.huggingface_api_key)
    if provider == "ollama":
        return bool(settings.ollama_base_url)
    return provider == "sentence_transformers"


def _model_for(provider: str, settings: Settings) -> str:
    return {
        "openai": settings.openai_embedding_model,
        "huggingface": settings.huggingface_embedding_model,
        "ollama": settings.ollama_embedding_model,
        "sentence_transformers": settings.sentence_transformers_model,
    }[provider]


def _dimension_for(provider: str, settings: Settings) -> Optional[int]:
    """
    EMBEDDING_DIMENSION wins; then the preset or a known model's size. None means
    the size is unknown until a local model is loaded.
    """
    if settings.embedding_dimension:
        return settings.embedding_dimension
    model = _model_for(provider, settings)
    preset = EMBEDDING_PRESETS[provider]
    if model == preset["model"]:
        return int(preset["dimension"])
    return EMBEDDING_MODEL_DIMENSIONS.get(model)


def _build(provider: str, settings: Settings) -> EmbeddingService:
    dim = _dimension_for(provider, settings)
    if dim is None and provider != "sentence_transformers":
        raise ValueError(
            f"Unknown output size for {provider} embedding model '{_model_for(provider, settings)}'; "
            "set EMBEDDING_DIMENSION"
        )
    timeout = settings.provider_timeout_seconds
    if provider == "openai":
        return OpenAIEmbeddingService(settings.openai_api_key, settings.openai_embedding_model, dim, timeout)
    if provider == "huggingface":
        return HuggingFaceEmbeddingService(
            settings.huggingface_api_key,
            settings.huggingface_embedding_model,
            dim,
            settings.huggingface_base_url,
            timeout,
        )
    if provider == "ollama":
        return OllamaEmbeddingService(settings.ollama_base_url, settings.ollama_embedding_model, dim, timeout)
    if provider == "sentence_transformers":
        return SentenceTransformersEmbeddingService(settings.sentence_transformers_model, dim)
    raise ValueError(f"Unknown embedding provider: {provider}")


def get_embedding_service(settings: Settings, provider: Optional[str] = None) -> EmbeddingService:
    """
    Return the embedding service for this process (bound once by the runtime).
    provider: override config; None uses EMBEDDING_PROVIDER, then the first
    usable entry of EMBEDDING_PRIORITY.
    """
    forced = (provider or settings.embedding_provider or "").strip().lower()
    if forced:
        if forced not in EMBEDDING_PRESETS:
            raise ValueError(f"Unknown embedding provider: {forced}")
        if not _usable(forced, settings):
            logger.warning("Embedding provider %s forced but not configured", forced)
        return _build(forced, settings)
    for candidate in EMBEDDING_PRIORITY:
        if _usable(candidate, settings):
            logger.info(
                "Using %s embeddings (%s dims)", candidate, _dimension_for(candidate, settings) or "model-reported"
            )
            return _build(candidate, settings)
    # sentence_transformers is always usable, so this is unreachable with the default priority
    raise ValueError("No embedding provider available")
