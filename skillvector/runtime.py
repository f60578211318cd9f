"""Runtime: providers and services bound once at startup and shared by every request."""

from typing import Optional

from skillvector.agents.filter_agent import QueryFilterExtractor
from skillvector.agents.profile_extractor import build_profile_extractor
from skillvector.agents.summary_agent import SummaryGenerator
from skillvector.config import Settings
from skillvector.embeddings.embedding_service import EmbeddingService, get_embedding_service
from skillvector.ranking.vector_index import PeopleVectorIndex
from skillvector.services.file_intake import scan_static_data
from skillvector.services.ingestion_pipeline import IngestionPipeline
from skillvector.services.llm_service import LLMService, get_llm_service
from skillvector.services.search_service import SearchService
from skillvector.utils.logger import get_logger

logger = get_logger(__name__)


class SearchRuntime:
    """Holds the bound embedding/LLM providers, the index and the two pipelines."""

    def __init__(
        self,
        settings: Settings,
        embedder: EmbeddingService,
        index: PeopleVectorIndex,
        llm: Optional[LLMService] = None,
    ) -> None:
        self.settings = settings
        self.embedder = embedder
        self.index = index
        self.llm = llm
        self.filter_extractor = QueryFilterExtractor(llm)
        self.summarizer = SummaryGenerator(llm)
        self.profile_extractor = build_profile_extractor(llm)
        self.search = SearchService(
            embedder,
            index,
            self.filter_extractor,
            self.summarizer,
            relevance_threshold=settings.relevance_threshold,
            min_candidate_pool=settings.min_candidate_pool,
            text_filter_location_role=settings.text_filter_location_role,
        )
        self.ingestion = IngestionPipeline(
            embedder,
            index,
            self.profile_extractor,
            max_logged_duplicates=settings.max_logged_duplicates,
            max_logged_invalid=settings.max_logged_invalid,
            concurrency=settings.ingest_concurrency,
        )

    async def start(self) -> None:
        """Ensure the collection schema; seed from static data when enabled."""
        await self.index.ensure_schema()
        if self.settings.seed_on_startup:
            files = scan_static_data(self.settings.static_data_path)
            if files:
                await self.ingestion.ingest_files(files)

    async def close(self) -> None:
        await self.index.close()

    def describe(self) -> dict:
        return {
            "embedding": {"provider": self.embedder.name, "model": self.embedder.model, "dimension": self.embedder.dimension},
            "languageModel": self.llm.name if self.llm else None,
            "collection": self.index.collection,
        }


def build_runtime(settings: Settings) -> SearchRuntime:
    """Bind providers from settings. Called once per process."""
    embedder = get_embedding_service(settings)
    llm = get_llm_service(settings)
    index = PeopleVectorIndex.from_url(
        settings.qdrant_url,
        settings.qdrant_collection,
        embedder.dimension,
        api_key=settings.qdrant_api_key,
        timeout=settings.provider_timeout_seconds,
        text_location_role=settings.text_filter_location_role,
    )
    logger.info(
        "Runtime bound: embeddings=%s (%s dims), llm=%s, collection=%s",
        embedder.name,
        embedder.dimension,
        llm.name if llm else "none",
        settings.qdrant_collection,
    )
    return SearchRuntime(settings, embedder, index, llm)
