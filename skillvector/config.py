"""Configuration loaded from environment variables."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# Load .env: try package dir then project root
_base = Path(__file__).resolve().parent
for _env_path in (_base / ".env", _base.parent / ".env"):
    if load_dotenv(_env_path):
        break
load_dotenv()  # also allow process env

# Ranking weights (additive, applied on top of cosine similarity)
ROLE_EXACT_BOOST: float = 0.2
ROLE_PARTIAL_BOOST: float = 0.1
SKILLS_BOOST: float = 0.15
MAX_SCORE: float = 1.0
RELEVANCE_THRESHOLD_DEFAULT: float = 0.3

# Search limits
SEARCH_LIMIT_DEFAULT: int = 20
SEARCH_LIMIT_MAX: int = 100
PEOPLE_LIMIT_DEFAULT: int = 100
MIN_CANDIDATE_POOL_DEFAULT: int = 50

# Summary generation
SUMMARY_CONTEXT_RESULTS: int = 10
SUMMARY_SNIPPET_CHARS: int = 200

# Free-text extraction
TEXT_EXTRACTION_MAX_CHARS: int = 12000

# Embedding presets: provider -> (default model, dimension)
EMBEDDING_PRESETS: dict = {
    "openai": {"model": "text-embedding-3-large", "dimension": 3072},
    "huggingface": {"model": "BAAI/bge-large-en-v1.5", "dimension": 1024},
    "ollama": {"model": "mxbai-embed-large", "dimension": 1024},
    "sentence_transformers": {"model": "all-MiniLM-L6-v2", "dimension": 384},
}

# Output size of well-known embedding models; anything else needs EMBEDDING_DIMENSION
EMBEDDING_MODEL_DIMENSIONS: dict = {
    "text-embedding-3-large": 3072,
    "text-embedding-3-small": 1536,
    "text-embedding-ada-002": 1536,
    "BAAI/bge-large-en-v1.5": 1024,
    "BAAI/bge-base-en-v1.5": 768,
    "BAAI/bge-small-en-v1.5": 384,
    "sentence-transformers/all-MiniLM-L6-v2": 384,
    "sentence-transformers/all-mpnet-base-v2": 768,
    "mxbai-embed-large": 1024,
    "nomic-embed-text": 768,
    "all-minilm": 384,
    "all-MiniLM-L6-v2": 384,
    "all-mpnet-base-v2": 768,
}

# Order in which providers are tried when none is forced
EMBEDDING_PRIORITY: tuple = ("openai", "huggingface", "ollama", "sentence_transformers")
LLM_PRIORITY: tuple = ("openai", "ollama")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Settings(BaseModel):
    """
    Process-wide settings. Built once at startup and passed to every component;
    never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    # API keys – never hardcode
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_embedding_model: str = EMBEDDING_PRESETS["openai"]["model"]
    huggingface_api_key: str = ""
    huggingface_embedding_model: str = EMBEDDING_PRESETS["huggingface"]["model"]
    huggingface_base_url: str = "https://router.huggingface.co/hf-inference/models"
    ollama_base_url: str = ""
    ollama_model: str = "llama3.2"
    ollama_embedding_model: str = EMBEDDING_PRESETS["ollama"]["model"]
    sentence_transformers_model: str = EMBEDDING_PRESETS["sentence_transformers"]["model"]

    # Provider overrides ("" = best available)
    embedding_provider: str = ""
    embedding_dimension: Optional[int] = None
    llm_provider: str = ""

    # Vector index
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: Optional[str] = None
    qdrant_collection: str = "people"

    # Network
    provider_timeout_seconds: float = 30.0

    # Ranking
    relevance_threshold: float = RELEVANCE_THRESHOLD_DEFAULT
    min_candidate_pool: int = MIN_CANDIDATE_POOL_DEFAULT
    text_filter_location_role: bool = False

    # Ingestion
    ingest_concurrency: int = 4
    max_logged_duplicates: int = 20
    max_logged_invalid: int = 20
    static_data_path: str = "static-data"
    seed_on_startup: bool = False

    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read the environment once and return an immutable Settings."""
    qdrant_url = os.getenv("QDRANT_URL", "")
    if not qdrant_url:
        protocol = os.getenv("QDRANT_PROTOCOL", "http")
        host = os.getenv("QDRANT_HOST", "localhost")
        port = _env_int("QDRANT_PORT", 6333)
        qdrant_url = f"{protocol}://{host}:{port}"

    dimension_raw = os.getenv("EMBEDDING_DIMENSION", "").strip()

    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        openai_embedding_model=os.getenv(
            "OPENAI_EMBEDDING_MODEL", EMBEDDING_PRESETS["openai"]["model"]
        ),
        huggingface_api_key=os.getenv("HUGGINGFACE_API_KEY", ""),
        huggingface_embedding_model=os.getenv(
            "HUGGINGFACE_EMBEDDING_MODEL", EMBEDDING_PRESETS["huggingface"]["model"]
        ),
        huggingface_base_url=os.getenv(
            "HUGGINGFACE_BASE_URL", "https://router.huggingface.co/hf-inference/models"
        ),
        ollama_base_url=os.getenv("OLLAMA_BASE_URL", ""),
        ollama_model=os.getenv("OLLAMA_MODEL", "llama3.2"),
        ollama_embedding_model=os.getenv(
            "OLLAMA_EMBEDDING_MODEL", EMBEDDING_PRESETS["ollama"]["model"]
        ),
        sentence_transformers_model=os.getenv(
            "SENTENCE_TRANSFORMERS_MODEL", EMBEDDING_PRESETS["sentence_transformers"]["model"]
        ),
        embedding_provider=os.getenv("EMBEDDING_PROVIDER", "").strip().lower(),
        embedding_dimension=int(dimension_raw) if dimension_raw.isdigit() else None,
        llm_provider=os.getenv("LLM_PROVIDER", "").strip().lower(),
        qdrant_url=qdrant_url,
        qdrant_api_key=os.getenv("QDRANT_API_KEY") or None,
        qdrant_collection=os.getenv("QDRANT_COLLECTION", "people"),
        provider_timeout_seconds=_env_float("PROVIDER_TIMEOUT_SECONDS", 30.0),
        relevance_threshold=_env_float("RELEVANCE_THRESHOLD", RELEVANCE_THRESHOLD_DEFAULT),
        min_candidate_pool=_env_int("MIN_CANDIDATE_POOL", MIN_CANDIDATE_POOL_DEFAULT),
        text_filter_location_role=_env_bool("TEXT_FILTER_LOCATION_ROLE", False),
        ingest_concurrency=max(1, _env_int("INGEST_CONCURRENCY", 4)),
        max_logged_duplicates=_env_int("MAX_LOGGED_DUPLICATES", 20),
        max_logged_invalid=_env_int("MAX_LOGGED_INVALID", 20),
        static_data_path=os.getenv("STATIC_DATA_PATH", "static-data"),
        seed_on_startup=_env_bool("SEED_ON_STARTUP", False),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
