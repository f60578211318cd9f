"""Hybrid people search: embed, over-fetch with filters, boost, threshold, paginate, summarize."""

from typing import List, Optional

from skillvector.agents.filter_agent import QueryFilterExtractor
from skillvector.agents.summary_agent import NO_MATCHES_SUMMARY, NO_MORE_SUMMARY, SummaryGenerator
from skillvector.config import RELEVANCE_THRESHOLD_DEFAULT, SEARCH_LIMIT_DEFAULT, SEARCH_LIMIT_MAX
from skillvector.embeddings.embedding_service import EmbeddingService
from skillvector.ranking.hybrid_ranker import fetch_limit, paginate, rank_candidates, translate_filters
from skillvector.ranking.vector_index import PeopleVectorIndex
from skillvector.schemas.filters import QueryFilterSpec
from skillvector.schemas.results import IndexedRecord, ResultPage
from skillvector.utils.logger import get_logger

logger = get_logger(__name__)


class SearchService:
    """Stateless per query; each call re-embeds and re-searches."""

    def __init__(
        self,
        embedder: EmbeddingService,
        index: PeopleVectorIndex,
        filter_extractor: QueryFilterExtractor,
        summarizer: SummaryGenerator,
        relevance_threshold: float = RELEVANCE_THRESHOLD_DEFAULT,
        min_candidate_pool: int = 0,
        text_filter_location_role: bool = False,
    ) -> None:
        self._embedder = embedder
        self._index = index
        self._filters = filter_extractor
        self._summarizer = summarizer
        self._threshold = relevance_threshold
        self._min_pool = min_candidate_pool
        self._text_location_role = text_filter_location_role

    async def search(
        self,
        query: str,
        limit: int = SEARCH_LIMIT_DEFAULT,
        offset: int = 0,
        filters: Optional[QueryFilterSpec] = None,
    ) -> ResultPage:
        """
        Answer one query. Filters are extracted from the query unless given.
        Raises ProviderError if the query cannot be embedded and VectorIndexError
        if the index fails; filter and summary failures only degrade the answer.
        """
        limit = max(1, min(int(limit), SEARCH_LIMIT_MAX))
        offset = max(0, int(offset))

        if filters is None:
            filters = await self._filters.extract_filters(query)
        vector = await self._embedder.embed_text(query)

        index_filter = translate_filters(filters, self._text_location_role)
        pool = fetch_limit(limit, offset, self._min_pool)
        candidates = await self._index.search(vector, pool, index_filter)
        ranked = rank_candidates(candidates, query, self._threshold)
        page, total, has_more = paginate(ranked, limit, offset)
        logger.info(
            "Search %r: candidates=%s kept=%s page=%s filters=%s",
            query,
            len(candidates),
            total,
            len(page),
            index_filter.fields(),
        )

        if not page:
            summary = NO_MATCHES_SUMMARY if offset == 0 else NO_MORE_SUMMARY
        else:
            summary = await self._summarizer.summarize(query, page, total)

        return ResultPage(
            results=page,
            total=total,
            limit=limit,
            offset=offset,
            has_more=has_more,
            summary=summary,
        )

    async def list_people(self, limit: int) -> List[IndexedRecord]:
        """Unfiltered listing through a cursor scroll."""
        return await self._index.scroll_all(max(1, int(limit)))
