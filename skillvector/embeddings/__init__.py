"""Embedding layer: OpenAI, Hugging Face, Ollama or SentenceTransformers (config-based)."""

from skillvector.embeddings.embedding_service import EmbeddingService, get_embedding_service

__all__ = ["EmbeddingService", "get_embedding_service"]
